"""Tests for ubergen.targets."""

from __future__ import annotations

import pytest

from ubergen.errors import TargetConfigurationError, UnsupportedTargetError
from ubergen.targets import (
    DotNetTarget,
    PythonTarget,
    TargetLanguage,
    parse_targets,
    translate_targets,
)

UBER_TARGETS = {
    "dotnet": {"namespace": "Amazon.CDK", "packageId": "Amazon.CDK.Lib"},
    "java": {"package": "software.amazon.awscdk", "maven": {"groupId": "software.amazon.awscdk"}},
    "python": {"module": "aws_cdk", "distName": "aws-cdk-lib"},
}


def test_translate_narrows_each_language_to_its_field() -> None:
    library = {
        "dotnet": {"namespace": "Amazon.CDK.AWS.S3", "packageId": "Amazon.CDK.AWS.S3"},
        "java": {"package": "software.amazon.awscdk.services.s3", "maven": {"artifactId": "s3"}},
        "python": {"module": "aws_cdk.aws_s3", "distName": "aws-cdk.aws-s3"},
    }

    result = translate_targets(UBER_TARGETS, library)

    assert result == {
        "dotnet": {"namespace": "Amazon.CDK.AWS.S3"},
        "java": {"package": "software.amazon.awscdk.services.s3"},
        "python": {"module": "aws_cdk.aws_s3"},
    }


def test_translate_prefixes_python_module_with_the_uber_module() -> None:
    uber = {"python": {"module": "aws_cdk_lib"}}
    library = {"python": {"module": "aws_cdk.aws_ec2"}}

    assert translate_targets(uber, library) == {"python": {"module": "aws_cdk_lib.aws_ec2"}}
    assert translate_targets(uber, {"python": {"module": "other.mod"}}) == {
        "python": {"module": "aws_cdk_lib.other.mod"}
    }
    assert translate_targets(uber, library, python_module_prefix="") == {
        "python": {"module": "aws_cdk_lib.aws_cdk.aws_ec2"}
    }


def test_translate_drops_languages_the_uber_package_does_not_emit() -> None:
    library = {
        "dotnet": {"namespace": "Amazon.CDK.AWS.S3"},
        "java": {"package": "software.amazon.awscdk.services.s3"},
    }

    assert translate_targets({"java": UBER_TARGETS["java"]}, library) == {
        "java": {"package": "software.amazon.awscdk.services.s3"}
    }


def test_translate_rejects_unknown_languages_even_when_unsupported_by_uber() -> None:
    with pytest.raises(UnsupportedTargetError, match="go"):
        translate_targets({"java": UBER_TARGETS["java"]}, {"go": {"moduleName": "github.com/x"}})


def test_translate_returns_none_without_library_targets() -> None:
    assert translate_targets(UBER_TARGETS, None) is None


def test_parse_targets_builds_tagged_variants() -> None:
    parsed = parse_targets({"dotnet": {"namespace": "A.B"}, "python": {"module": "a.b"}})

    assert parsed == {
        TargetLanguage.DOTNET: DotNetTarget("A.B"),
        TargetLanguage.PYTHON: PythonTarget("a.b"),
    }


def test_parse_targets_requires_language_field() -> None:
    with pytest.raises(TargetConfigurationError, match="namespace"):
        parse_targets({"dotnet": {"packageId": "A.B"}})


def test_translate_ignores_incomplete_blocks_for_languages_the_uber_package_drops() -> None:
    uber = {"dotnet": UBER_TARGETS["dotnet"]}
    library = {
        "dotnet": {"namespace": "Amazon.CDK.AWS.S3"},
        "java": {"maven": {"groupId": "software.amazon.awscdk", "artifactId": "s3"}},
    }

    assert translate_targets(uber, library) == {"dotnet": {"namespace": "Amazon.CDK.AWS.S3"}}


def test_translate_still_validates_languages_the_uber_package_emits() -> None:
    with pytest.raises(TargetConfigurationError, match="package"):
        translate_targets(UBER_TARGETS, {"java": {"maven": {"artifactId": "s3"}}})

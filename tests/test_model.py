import pytest
import yaml
from pydantic import ValidationError

from pushjob.model import BuildSpec, JobDefinition, PushSpec, ResourcesSpec, TriggerSpec


def test_job_from_camel_case_mapping(job):
    assert job.name == "Billing API: build and push to docker"
    assert job.trigger.exclude_patterns == ["README.md"]
    assert job.resources.cpu == 4.0
    assert job.resources.memory == 3000
    assert job.build.dockerfile_path == "./docker/Dockerfile"
    assert job.build.labels == {"vendor": "Acme Platform Team"}
    assert job.push.tags == ["version-0.$JB_SPACE_EXECUTION_NUMBER", "$BRANCH"]


@pytest.mark.parametrize(
    "value, expected",
    [("4.cpu", 4.0), ("500.mcpu", 0.5), ("2", 2.0), (2, 2.0), ("0.5 cpu", 0.5)],
)
def test_cpu_quantities(value, expected):
    assert ResourcesSpec(cpu=value).cpu == expected


@pytest.mark.parametrize(
    "value, expected",
    [("3000.mb", 3000), ("3.gb", 3072), ("3000Mi", 3000), ("1.5.gb", 1536), (512, 512)],
)
def test_memory_quantities(value, expected):
    assert ResourcesSpec(memory=value).memory == expected


@pytest.mark.parametrize(
    "field, value",
    [
        ("cpu", "lots"),
        ("cpu", 0),
        ("cpu", float("inf")),
        ("cpu", float("nan")),
        ("cpu", 0.0001),
        ("memory", "-1.mb"),
        ("memory", 0),
        ("memory", float("inf")),
    ],
)
def test_bad_quantities(field, value):
    with pytest.raises(ValidationError):
        ResourcesSpec(**{field: value})


def test_non_finite_cpu_from_yaml_is_rejected(job_data):
    job_data["resources"]["cpu"] = yaml.safe_load(".inf")
    with pytest.raises(ValidationError):
        JobDefinition.model_validate(job_data)


def test_cpu_rounded_to_millicpu():
    assert ResourcesSpec(cpu=0.0024).cpu == 0.002
    assert ResourcesSpec(cpu="1.mcpu").cpu == 0.001


@pytest.mark.parametrize("key", ["dockerfilePath", "dockerfile_path", "file"])
def test_dockerfile_aliases(key):
    build = BuildSpec.model_validate({key: "docker/Dockerfile"})
    assert build.dockerfile_path == "docker/Dockerfile"
    assert build.model_dump(by_alias=True)["dockerfilePath"] == "docker/Dockerfile"


def test_build_defaults_and_stringified_labels():
    build = BuildSpec.model_validate({"labels": {"version": 3, "stable": True}})
    assert build.context == "."
    assert build.dockerfile_path == "Dockerfile"
    assert build.labels == {"version": "3", "stable": "true"}


def test_patterns_deduplicated_in_order():
    trigger = TriggerSpec(includePatterns=["*.toml", "*.json", "*.toml"])
    assert trigger.include_patterns == ["*.toml", "*.json"]


def test_snake_case_keys_accepted():
    trigger = TriggerSpec.model_validate({"include_patterns": ["src/**"], "case_sensitive": False})
    assert trigger.include_patterns == ["src/**"]
    assert trigger.case_sensitive is False


@pytest.mark.parametrize(
    "repository",
    [
        "",
        "registry.example.com/app:latest",
        "https://registry.example.com/app",
        "registry.example.com/app@sha256:abc",
        "registry example.com/app",
    ],
)
def test_bad_repositories(repository):
    with pytest.raises(ValidationError):
        PushSpec(repository=repository, tags=["latest"])


def test_registry_with_port_is_fine():
    push = PushSpec(repository="localhost:5000/app", tags=["latest"])
    assert push.repository == "localhost:5000/app"


def test_push_requires_tags():
    with pytest.raises(ValidationError):
        PushSpec(repository="registry.example.com/app", tags=[])
    with pytest.raises(ValidationError):
        PushSpec(repository="registry.example.com/app", tags=["  "])


def test_unknown_fields_rejected(job_data):
    job_data["build"]["cache"] = True
    with pytest.raises(ValidationError):
        JobDefinition.model_validate(job_data)


def test_definition_is_immutable(job):
    with pytest.raises(ValidationError):
        job.name = "other"

import yaml

from pushjob.core.loader import job_from_mapping
from pushjob.core.renders import gitlab, job_yaml

from conftest import REPOSITORY


def test_gitlab_job(job):
    text = gitlab.render(job)
    assert text.startswith(f"# {job.name}\n# WARNING:")

    document = yaml.safe_load(text)
    assert document["stages"] == ["docker"]
    entry = document[gitlab.job_key(job)]
    assert entry["rules"] == [
        {
            "if": '$CI_PIPELINE_SOURCE == "push"',
            "changes": list(job.trigger.include_patterns),
        }
    ]
    assert entry["variables"]["BRANCH"] == "$CI_COMMIT_REF_NAME"
    assert entry["variables"]["JB_SPACE_EXECUTION_NUMBER"] == "$CI_PIPELINE_IID"
    assert entry["variables"]["KUBERNETES_CPU_LIMIT"] == "4"
    assert entry["variables"]["KUBERNETES_MEMORY_LIMIT"] == "3000Mi"
    assert entry["script"][1] == f'docker push "{REPOSITORY}:version-0.$JB_SPACE_EXECUTION_NUMBER"'
    assert "'vendor=Acme Platform Team'" in entry["script"][0]


def test_gitlab_job_key():
    class _Job:
        name = "Billing API: build and push to docker"

    assert gitlab.job_key(_Job()) == "billing_api_build_and_push_to_docker"


def test_gitlab_limitations(job):
    warnings = gitlab.limitations(job)
    assert any("README.md" in w for w in warnings)


def test_shell_arg_quoting():
    assert gitlab._shell_arg("plain-arg") == "plain-arg"
    assert gitlab._shell_arg("a b") == "'a b'"
    assert gitlab._shell_arg('x:$TAG "q"') == '"x:$TAG \\"q\\""'
    assert gitlab._shell_arg("cost-$$5") == '"cost-\\$5"'


def test_yaml_round_trip(job):
    text = job_yaml.render(job)
    payload = yaml.safe_load(text)
    assert "excludePatterns" in payload["trigger"]
    assert payload["build"]["dockerfilePath"] == "./docker/Dockerfile"
    assert job_from_mapping(payload) == job

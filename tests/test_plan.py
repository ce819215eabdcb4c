from pushjob.core import config
from pushjob.core.models import RunContext, TriggerDecision
from pushjob.core.services.builders.plan import build_command, build_plan, summarize_plan
from pushjob.model import JobDefinition

from conftest import REPOSITORY


def test_build_plan_for_push(job):
    plan, logs, warnings = build_plan(job, RunContext(execution_number=42, branch="main"))

    assert plan.tags == ["version-0.42", "main"]
    assert plan.image_refs == [f"{REPOSITORY}:version-0.42", f"{REPOSITORY}:main"]
    assert plan.push_commands == [
        [config.DOCKER_BIN, "push", f"{REPOSITORY}:version-0.42"],
        [config.DOCKER_BIN, "push", f"{REPOSITORY}:main"],
    ]
    assert plan.cpu == 4.0
    assert plan.memory_mb == 3000
    assert logs
    assert warnings == []


def test_build_command_carries_resources_labels_and_context(job):
    cmd = build_command(job, [f"{REPOSITORY}:main"])
    assert cmd[:4] == [config.DOCKER_BIN, "build", "--file", "./docker/Dockerfile"]
    assert cmd[cmd.index("--memory") + 1] == "3000m"
    assert cmd[cmd.index("--cpu-period") + 1] == "100000"
    assert cmd[cmd.index("--cpu-quota") + 1] == "400000"
    assert cmd[cmd.index("--label") + 1] == "vendor=Acme Platform Team"
    assert cmd[cmd.index("--tag") + 1] == f"{REPOSITORY}:main"
    assert cmd[-1] == "."


def test_build_args_and_fractional_cpu(job_data):
    job_data["resources"]["cpu"] = "500.mcpu"
    job_data["build"]["args"] = {"PROFILE": "release"}
    job = JobDefinition.model_validate(job_data)
    cmd = build_command(job, [])
    assert cmd[cmd.index("--cpu-quota") + 1] == "50000"
    assert cmd[cmd.index("--build-arg") + 1] == "PROFILE=release"
    assert "--tag" not in cmd


def test_script_is_shell_quoted(job):
    plan, _, _ = build_plan(job, RunContext(execution_number=1, branch="main"))
    script = plan.script()
    assert len(script) == 3
    assert "'vendor=Acme Platform Team'" in script[0]
    assert script[1] == f"{config.DOCKER_BIN} push {REPOSITORY}:version-0.1"


def test_summary(job):
    plan, _, _ = build_plan(job, RunContext(execution_number=3, branch="main"))
    fired = summarize_plan(job, TriggerDecision(fired=True, matched_paths=["Cargo.toml"]), plan)
    assert fired.fired is True
    assert fired.tags_count == 2
    assert "version-0.3" in fired.description

    skipped = summarize_plan(job, TriggerDecision(fired=False))
    assert skipped.fired is False
    assert skipped.image_refs == []

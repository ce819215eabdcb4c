import json

import pytest

from pushjob.core.exceptions import JobDefinitionError, PatternError
from pushjob.core.loader import job_from_mapping, load_job_definition


def test_load_yaml(job_file, job):
    loaded, warnings = load_job_definition(job_file)
    assert loaded == job
    assert warnings == []


def test_load_json(tmp_path, job_data, job):
    path = tmp_path / "job.json"
    path.write_text(json.dumps(job_data), encoding="utf-8")
    loaded, _ = load_job_definition(str(path))
    assert loaded == job


def test_load_space_dsl(space_file, job):
    loaded, warnings = load_job_definition(space_file)
    assert loaded == job
    assert warnings == []


def test_unsupported_suffix(tmp_path):
    path = tmp_path / "job.txt"
    path.write_text("name: x", encoding="utf-8")
    with pytest.raises(JobDefinitionError) as exc:
        load_job_definition(path)
    assert "unsupported format" in exc.value.reason


def test_missing_file(tmp_path):
    with pytest.raises(JobDefinitionError) as exc:
        load_job_definition(tmp_path / "absent.yml")
    assert exc.value.reason == "cannot read file"


def test_invalid_yaml(tmp_path):
    path = tmp_path / "job.yml"
    path.write_text("name: [unclosed", encoding="utf-8")
    with pytest.raises(JobDefinitionError) as exc:
        load_job_definition(path)
    assert exc.value.logs


def test_yaml_must_be_mapping(tmp_path):
    path = tmp_path / "job.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(JobDefinitionError):
        load_job_definition(path)


def test_schema_errors_are_collected(job_data):
    del job_data["push"]
    job_data["resources"]["cpu"] = "a lot"
    with pytest.raises(JobDefinitionError) as exc:
        job_from_mapping(job_data, source="inline")
    joined = "\n".join(exc.value.logs)
    assert "push" in joined
    assert "resources.cpu" in joined


def test_space_schema_errors_are_wrapped(tmp_path):
    path = tmp_path / ".space.kts"
    path.write_text(
        'job(" ") { docker { push("r.example.com/x") { tags("a") } } }', encoding="utf-8"
    )
    with pytest.raises(JobDefinitionError) as exc:
        load_job_definition(path)
    assert any(line.startswith("name") for line in exc.value.logs)


def test_bad_glob_in_file(tmp_path, job_data):
    job_data["trigger"]["includePatterns"].append("src/[")
    path = tmp_path / "job.json"
    path.write_text(json.dumps(job_data), encoding="utf-8")
    with pytest.raises(PatternError):
        load_job_definition(path)

import copy
from pathlib import Path

import pytest
import yaml
from git import Actor, Repo

from pushjob.model import JobDefinition


JOB_DATA = {
    "name": "Billing API: build and push to docker",
    "trigger": {
        "excludePatterns": ["README.md"],
        "includePatterns": [
            "*.json",
            "dockerfile/Dockerfile",
            "*.toml",
            "**/*.toml",
            "**/src/**",
        ],
    },
    "resources": {"cpu": "4.cpu", "memory": "3000.mb"},
    "build": {
        "context": ".",
        "dockerfilePath": "./docker/Dockerfile",
        "labels": {"vendor": "Acme Platform Team"},
    },
    "push": {
        "repository": "registry.example.com/p/backend/containers/billing-api",
        "tags": ["version-0.$JB_SPACE_EXECUTION_NUMBER", "$BRANCH"],
    },
}

SPACE_KTS = r'''// Billing API automation
job("Billing API: build and push to docker") {
    startOn {
        gitPush {
            pathFilter {
                -"README.md"
                +"*.json"
                +"dockerfile/Dockerfile"
                +"*.toml"
                +"**/*.toml"
                +"**/src/**"
            }
        }
    }

    docker {
        resources {
            cpu = 4.cpu
            memory = 3000.mb
        }
        build {
            context = "."
            file = "./docker/Dockerfile"
            labels["vendor"] = "Acme Platform Team"
        }

        push("registry.example.com/p/backend/containers/billing-api") {
            tags("version-0.\$JB_SPACE_EXECUTION_NUMBER", "\$BRANCH")
        }
    }
}
'''

REPOSITORY = JOB_DATA["push"]["repository"]


@pytest.fixture
def job_data():
    return copy.deepcopy(JOB_DATA)


@pytest.fixture
def job(job_data):
    return JobDefinition.model_validate(job_data)


@pytest.fixture
def job_file(tmp_path, job_data) -> Path:
    path = tmp_path / "pushjob.yml"
    path.write_text(yaml.safe_dump(job_data, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def space_file(tmp_path) -> Path:
    path = tmp_path / ".space.kts"
    path.write_text(SPACE_KTS, encoding="utf-8")
    return path


class GitWorkspace:
    """Временный git-репозиторий: commit({"path": "content"}) -> Commit."""

    actor = Actor("Test Runner", "runner@example.com")

    def __init__(self, root: Path) -> None:
        self.root = root
        self.repo = Repo.init(root)

    def commit(self, files, message="change", remove=(), rename=None):
        for rel, content in files.items():
            target = self.root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        if files:
            self.repo.index.add(list(files))
        if remove:
            self.repo.index.remove(list(remove), working_tree=True)
        if rename:
            self.repo.index.move(list(rename))
        return self.repo.index.commit(message, author=self.actor, committer=self.actor)


@pytest.fixture
def git_repo(tmp_path):
    workspace = GitWorkspace(tmp_path / "repo")
    yield workspace
    workspace.repo.close()

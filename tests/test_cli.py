import json

import pytest
import yaml

from arena.cli.admin import async_main, build_parser


@pytest.fixture
def config(tmp_path):
    path = tmp_path / "turingarena.config.json"
    path.write_text(json.dumps({"DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"}))
    return str(path)


@pytest.fixture
def contest_dir(tmp_path):
    base = tmp_path / "demo"
    (base / "sum").mkdir(parents=True)
    (base / "turingarena.yaml").write_text(yaml.safe_dump({
        "title": "CLI Contest",
        "start": "2020-01-01T00:00:00+00:00",
        "end": "2999-01-01T00:00:00+00:00",
        "users": [{"username": "alice", "name": "Alice", "token": "alice-token"}],
        "problems": ["sum"],
    }))
    (base / "sum" / "problem.yaml").write_text(yaml.safe_dump({
        "title": "Sum",
        "awards": [{"name": "all", "max_score": 100}],
    }))
    return str(base)


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_add_user_flags():
    args = build_parser().parse_args(["add-user", "--username", "bob", "--name", "Bob", "--token", "t", "--admin"])

    assert args.command == "add-user"
    assert args.admin is True
    assert args.contest is None


async def test_import_and_view_contest(config, contest_dir, capsys):
    assert await async_main(["--config", config, "import", contest_dir]) == 0
    capsys.readouterr()

    assert await async_main(["--config", config, "view-contest", "--username", "alice"]) == 0
    view = json.loads(capsys.readouterr().out)

    assert view["title"] == "CLI Contest"
    assert view["user"]["username"] == "alice"
    problems = view["contest_view"]["problem_set"]["problems"]
    assert [p["name"] for p in problems] == ["sum"]
    assert problems[0]["tackling"]["can_submit"] is True


async def test_user_commands(config, contest_dir, capsys):
    assert await async_main(["--config", config, "import", contest_dir]) == 0
    assert await async_main([
        "--config", config, "add-user",
        "--username", "bob", "--name", "Bob", "--token", "bob-token", "--contest", "demo",
    ]) == 0
    capsys.readouterr()

    assert await async_main(["--config", config, "list-users"]) == 0
    users = json.loads(capsys.readouterr().out)
    assert [u["username"] for u in users["users"]] == ["alice", "bob"]

    assert await async_main(["--config", config, "delete-user", "bob"]) == 0
    assert await async_main(["--config", config, "delete-user", "bob"]) == 1


async def test_duplicate_import_fails(config, contest_dir):
    assert await async_main(["--config", config, "import", contest_dir]) == 0
    assert await async_main(["--config", config, "import", contest_dir]) == 1
    assert await async_main(["--config", config, "import", "--force", contest_dir]) == 0


async def test_problem_commands(config, contest_dir, tmp_path):
    extra = tmp_path / "extra"
    extra.mkdir()
    (extra / "statement.txt").write_text("extra")

    assert await async_main(["--config", config, "import", contest_dir]) == 0
    assert await async_main([
        "--config", config, "add-problem", "--name", "extra", "--path", str(extra), "--contest", "demo",
    ]) == 0
    assert await async_main(["--config", config, "delete-problem", "extra"]) == 0
    assert await async_main(["--config", config, "delete-problem", "extra"]) == 1

"""
Tests for the command-line entry point.
"""

import json
import uuid
from unittest.mock import patch

import pytest

import main
from core.config_loader import AllocationConfig, AppConfig
from database.uow import allocation_uow
from tests import seed_position, seed_recruiter


@pytest.fixture
def cli(session_factory):
    config = AppConfig(allocation=AllocationConfig(locale="en"))
    with patch("main.load_config", return_value=config), \
            patch("main.get_session_factory", return_value=session_factory):
        yield main.main


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        main.build_parser().parse_args([])


def test_parser_collects_repeated_position_ids():
    args = main.build_parser().parse_args(["assign", "--position-id", "a", "--position-id", "b", "--force"])
    assert args.position_id == ["a", "b"]
    assert args.force is True


def test_assign_prints_summary(cli, session_factory, capsys):
    with allocation_uow(session_factory) as repo:
        seed_recruiter(repo, name="Ana Torres")
        position_id = seed_position(repo).id

    assert cli(["assign", "--position-id", str(position_id)]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["success"] is True
    assert summary["state"] == "Completed"
    assert summary["assignments"][0]["recruiter_name"] == "Ana Torres"


def test_assign_reports_allocation_errors(cli, session_factory, capsys):
    with allocation_uow(session_factory) as repo:
        seed_recruiter(repo)

    assert cli(["assign", "--position-id", str(uuid.uuid4())]) == 1

    output = json.loads(capsys.readouterr().out)
    assert output == {"success": False, "error": "Position not found", "type": "NotFoundError"}


def test_assign_rejects_malformed_id(cli):
    assert cli(["assign", "--position-id", "PST-001"]) == 2


def test_queue_lists_open_positions(cli, session_factory, capsys):
    with allocation_uow(session_factory) as repo:
        seed_position(repo, title="Jefe de Turno", priority="P1")
        seed_position(repo, title="Operario", priority="P3", level="operario")

    assert cli(["queue"]) == 0

    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 2
    assert "Jefe de Turno" in lines[0]
    assert "critical" in lines[0]

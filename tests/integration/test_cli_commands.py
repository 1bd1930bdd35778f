from __future__ import annotations

import json

from typer.testing import CliRunner

from careerdesk.cli.app import app
from careerdesk.core.moderation import PendingFieldManager
from careerdesk.db.models import Employer
from careerdesk.db.session import SessionLocal
from careerdesk.types import EmployerChangeProposal

runner = CliRunner()


def test_employer_review_commands(make_employer) -> None:
    employer_id = make_employer("empA")
    with SessionLocal() as db:
        PendingFieldManager(db).propose_change(employer_id, EmployerChangeProposal(mobile_no="222"))

    pending = runner.invoke(app, ["employer", "pending"])
    assert pending.exit_code == 0
    assert json.loads(pending.stdout)[0]["pending"]["mobile_no"] == "222"

    approved = runner.invoke(app, ["employer", "approve", "--employer-id", str(employer_id), "--scope", "profile"])
    assert approved.exit_code == 0
    assert json.loads(approved.stdout)["applied"] == ["mobile_no"]

    with SessionLocal() as db:
        assert db.get(Employer, employer_id).mobile_no == "222"

    rejected = runner.invoke(app, ["employer", "reject", "--employer-id", "999", "--scope", "profile"])
    assert rejected.exit_code == 1
    assert json.loads(rejected.stdout) == {"success": False, "error": "Employer 999 not found"}


def test_admin_create_and_notifications_list() -> None:
    created = runner.invoke(app, ["admin", "create", "--username", "ops", "--password", "ops-pass-123"])
    assert created.exit_code == 0
    assert json.loads(created.stdout) == {"user_name": "ops", "created": True}

    again = runner.invoke(app, ["admin", "create", "--username", "ops", "--password", "ops-pass-123"])
    assert json.loads(again.stdout)["created"] is False

    listed = runner.invoke(app, ["notifications", "list", "--limit", "10"])
    assert listed.exit_code == 0
    assert json.loads(listed.stdout)["total"] == 0

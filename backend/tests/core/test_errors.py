"""Error Hierarchy — codes, statuses and the REST envelope."""

import pytest

from app.core.errors import (
    AlreadyMemberError,
    CardNotInColumnError,
    ConcurrencyError,
    DatabaseError,
    DuplicatePendingInviteError,
    ErrorContext,
    ForbiddenError,
    InvalidColumnError,
    InvalidInviteActionError,
    InviteAlreadyRespondedError,
    ResourceNotFoundError,
)


@pytest.mark.parametrize("error,code,status", [
    (ResourceNotFoundError("Board", "b1"), "RESOURCE_NOT_FOUND", 404),
    (CardNotInColumnError("c1", "todo"), "CARD_NOT_IN_COLUMN", 404),
    (InvalidColumnError(["archive"]), "INVALID_COLUMN", 400),
    (InvalidInviteActionError("maybe"), "INVALID_ACTION", 400),
    (DuplicatePendingInviteError(), "DUPLICATE_PENDING_INVITE", 409),
    (AlreadyMemberError("u1"), "ALREADY_MEMBER", 409),
    (InviteAlreadyRespondedError("accepted"), "ALREADY_IN_TERMINAL_STATE", 409),
    (ConcurrencyError("retry"), "CONCURRENCY_CONFLICT", 409),
    (ForbiddenError("nope"), "FORBIDDEN", 403),
    (DatabaseError("down", "execute"), "DATABASE_ERROR", 503),
])
def test_error_codes_and_statuses(error, code, status):
    assert error.code == code
    assert error.http_status == status


def test_to_response_envelope():
    error = CardNotInColumnError(
        "c1", "todo", ErrorContext(board_id="b1", card_id="c1"),
    )
    body = error.to_response()["error"]
    assert body["code"] == "CARD_NOT_IN_COLUMN"
    assert body["message"] == "Card 'c1' not found in column 'todo'"
    assert body["category"] == "resource_not_found"
    assert body["context"]["board_id"] == "b1"
    assert body["context"]["team_id"] is None


def test_user_message_overrides_message():
    error = InvalidColumnError(["x"], ErrorContext(user_message="Pick an existing column"))
    assert error.to_response()["error"]["message"] == "Pick an existing column"

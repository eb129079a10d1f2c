"""Team Access Rules — membership and owner checks."""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.core.errors import ForbiddenError
from app.core.invite_lifecycle import is_member
from app.core.team_access import find_membership, require_member, require_owner

OWNER_ID = uuid4()
MEMBER_ID = uuid4()
MEMBERS = [
    SimpleNamespace(user_id=OWNER_ID, role="owner"),
    SimpleNamespace(user_id=MEMBER_ID, role="member"),
]


def test_find_membership():
    assert find_membership(MEMBERS, MEMBER_ID).role == "member"
    assert find_membership(MEMBERS, uuid4()) is None
    assert is_member(MEMBERS, OWNER_ID)


def test_require_member_rejects_outsider():
    team_id = uuid4()
    with pytest.raises(ForbiddenError) as exc:
        require_member(MEMBERS, uuid4(), team_id)
    assert exc.value.http_status == 403
    assert exc.value.context.team_id == str(team_id)


def test_require_owner_rejects_plain_member():
    assert require_member(MEMBERS, MEMBER_ID).user_id == MEMBER_ID
    with pytest.raises(ForbiddenError, match="owners"):
        require_owner(MEMBERS, MEMBER_ID)


def test_require_owner_accepts_owner():
    assert require_owner(MEMBERS, OWNER_ID).role == "owner"

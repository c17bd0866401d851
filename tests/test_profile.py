import pytest

from cugini.services import profile_service
from cugini.services.core_service import CoreError
from cugini.services.profile_service import (
    MSG_SAVED,
    MSG_SAVED_METADATA_LAGGING,
    get_profile,
    is_profile_complete,
    normalize_phone,
    save_profile,
    upload_avatar,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("+56 9 1234 5678", "+56912345678"),
        ("56912345678", "+56912345678"),
        ("912345678", "+56912345678"),
        ("9 1234 5678", "+56912345678"),
        (" 1234 ", "1234"),
        ("", ""),
    ],
)
def test_normalize_phone(raw, expected):
    assert normalize_phone(raw) == expected


def test_profile_falls_back_to_auth_metadata(ctx):
    profile = get_profile(ctx)
    assert profile["full_name"] == "Ana Pérez"
    assert profile["phone"] == ""
    assert not is_profile_complete(profile)


def test_profile_row_wins(ctx, sb):
    sb.seed("profiles", {"user_id": "user-1", "full_name": "Ana P.", "phone": "+56912345678"})
    profile = get_profile(ctx)
    assert profile["full_name"] == "Ana P."
    assert is_profile_complete(profile)


def test_save_upserts_and_syncs_metadata(ctx, sb, monkeypatch):
    monkeypatch.setattr(profile_service, "get_supabase", lambda: sb)

    out = save_profile(ctx, full_name=" Ana ", phone="9 1234 5678", favorite_pizza="Pepperoni")
    save_profile(ctx, full_name="Ana", phone="912345678")

    assert out["message"] == MSG_SAVED
    assert out["profile"]["phone"] == "+56912345678"
    assert len(sb.tables["profiles"]) == 1
    uid, attrs = sb.auth.admin.updates[0]
    assert uid == "user-1"
    assert attrs["user_metadata"]["full_name"] == "Ana"


def test_save_without_metadata_sync_still_succeeds(ctx, monkeypatch):
    monkeypatch.setattr(profile_service, "get_supabase", lambda: None)
    out = save_profile(ctx, full_name="Ana", phone="912345678")
    assert out["message"] == MSG_SAVED_METADATA_LAGGING


def test_avatar_upload_path(ctx, sb):
    url = upload_avatar(ctx, b"\xff\xd8jpeg", now_ms=1700000000000)
    bucket, path, _, options = sb.storage.uploads[0]
    assert (bucket, path) == ("avatars", "user-1-1700000000000.jpg")
    assert options["upsert"] == "true"
    assert url == "https://storage.test/avatars/user-1-1700000000000.jpg"


def test_avatar_upload_failure(ctx, sb):
    sb.storage.fail = True
    with pytest.raises(CoreError) as exc:
        upload_avatar(ctx, b"data")
    assert exc.value.code == "storage_error"

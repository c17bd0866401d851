import pytest

from cugini.services.core_service import CoreError
from cugini.services.rewards_service import (
    REWARDS_TABLE,
    create_reward,
    list_rewards,
    set_reward_active,
    update_reward,
    upload_reward_image,
)


def test_list_sorted_by_cost_and_active_filter(sb):
    sb.seed(
        REWARDS_TABLE,
        {"name": "Pizza familiar", "points_cost": 900, "is_active": True},
        {"name": "Bebida", "points_cost": 300},
        {"name": "Postre", "points_cost": 450, "is_active": False},
    )
    assert [r.name for r in list_rewards(sb)] == ["Bebida", "Postre", "Pizza familiar"]
    assert [r.name for r in list_rewards(sb, active_only=True)] == ["Bebida", "Pizza familiar"]


@pytest.mark.parametrize("name, cost", [("", 100), ("Pizza", 0), ("Pizza", -5)])
def test_invalid_reward(sb, name, cost):
    with pytest.raises(CoreError):
        create_reward(sb, name=name, points_cost=cost)


def test_update_reactivates_and_keeps_image(sb):
    sb.seed(REWARDS_TABLE, {"id": 4, "name": "Pizza", "points_cost": 900, "is_active": False, "image_url": "old.jpg"})
    update_reward(sb, 4, name="Pizza XL", points_cost=1000)
    row = sb.tables[REWARDS_TABLE][0]
    assert row["name"] == "Pizza XL"
    assert row["is_active"] is True
    assert row["image_url"] == "old.jpg"


def test_toggle(sb):
    created = create_reward(sb, name="Bebida", points_cost=300)
    set_reward_active(sb, created["id"], False)
    assert list_rewards(sb, active_only=True) == []


def test_image_upload(sb):
    url = upload_reward_image(sb, "Foto.PNG", b"png", "image/png", now_ms=42)
    assert sb.storage.uploads[0][:2] == ("cugini-images", "rewards/reward-42.png")
    assert url.endswith("rewards/reward-42.png")


@pytest.mark.parametrize("filename", ["x./../y", "foto", "foto.", "foto.jpeg?v=2", "../../etc/passwd"])
def test_image_path_never_takes_unsafe_extension(sb, filename):
    upload_reward_image(sb, filename, b"img", now_ms=7)
    assert sb.storage.uploads[0][1] == "rewards/reward-7.jpg"

import pytest

from cugini.services.loyalty.tiers import TIERS, Tier, next_tier, resolve_tier


@pytest.mark.parametrize(
    "total, expected",
    [
        (-5, "Bronce"),
        (0, "Bronce"),
        (599, "Bronce"),
        (600, "Plata"),
        (999, "Plata"),
        (1000, "Oro"),
        (1499, "Oro"),
        (1500, "Diamante"),
        (10_000, "Diamante"),
    ],
)
def test_resolve_tier_picks_highest_reached_minimum(total, expected):
    assert resolve_tier(total).name == expected


def test_resolve_tier_ignores_declaration_order():
    shuffled = [TIERS[2], TIERS[0], TIERS[3], TIERS[1]]
    assert resolve_tier(1200, shuffled).name == "Oro"


def test_resolved_tier_minimum_never_exceeds_total():
    for total in range(-10, 2000, 37):
        tier = resolve_tier(total)
        qualifying = [t for t in TIERS if t.min <= total]
        if qualifying:
            assert tier.min == max(t.min for t in qualifying)
        else:
            assert tier == TIERS[0]


def test_next_tier():
    assert next_tier(0) == Tier("Plata", 600)
    assert next_tier(600).name == "Oro"
    assert next_tier(1500) is None


def test_empty_ladder_is_rejected():
    with pytest.raises(ValueError):
        resolve_tier(100, [])

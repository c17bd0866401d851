import pytest

from cugini.services.loyalty.progress import GOALS, Progress, compute_progress


def test_between_goals_is_local_to_segment():
    assert compute_progress(450, [300, 600, 1000]) == Progress(pct=50, goal=600, remain=150)


def test_zero_base_targets_first_goal():
    assert compute_progress(0, [300, 600]) == Progress(pct=0, goal=300, remain=300)


def test_exactly_on_last_goal_synthesizes_next():
    assert compute_progress(1000, [300, 600, 1000]) == Progress(pct=0, goal=2000, remain=1000)


def test_reaching_a_goal_restarts_the_bar():
    assert compute_progress(600, [300, 600, 1000]) == Progress(pct=0, goal=1000, remain=400)


def test_past_last_goal_is_clamped():
    p = compute_progress(5000, [300, 600, 1000])
    assert p.goal == 2000
    assert p.pct == 100
    assert p.remain == -3000


def test_half_rounds_up():
    # 150/300 = 50.0, 1/8*100 = 12.5 -> 13
    assert compute_progress(450, [300, 600]).pct == 50
    assert compute_progress(1, [8]).pct == 13


def test_goals_are_sorted_first():
    assert compute_progress(450, [1000, 300, 600]).goal == 600


def test_empty_goals():
    assert compute_progress(123, []) == Progress(pct=0, goal=0, remain=0)


@pytest.mark.parametrize("base", range(0, 3000, 53))
def test_pct_bounds_with_default_goals(base):
    p = compute_progress(base, GOALS)
    assert 0 <= p.pct <= 100
    assert p.remain == p.goal - base
    assert p.goal > base

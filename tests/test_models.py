import pytest

from shooting_range.core.models import Game, GameTarget, GameTargetInput, Target, validate_game

def test_window_requires_start_before_end():
    with pytest.raises(ValueError):
        GameTargetInput(target_id=1, start_time=5, end_time=5)
    with pytest.raises(ValueError):
        GameTargetInput(target_id=1, start_time=-1, end_time=5)

def test_window_active_is_half_open():
    gt = GameTarget(target=Target(node_id=1, distance=10.0, image_num=1), start_time=2, end_time=4)
    assert not gt.is_active(1)
    assert gt.is_active(2)
    assert gt.is_active(3)
    assert not gt.is_active(4)

def test_game_orders_windows_by_start():
    t = Target(node_id=1, distance=10.0, image_num=1)
    game = Game(name="g", total_time=10, targets=[
        GameTarget(target=t, start_time=5, end_time=6),
        GameTarget(target=t, start_time=0, end_time=1),
    ])
    assert [gt.start_time for gt in game.targets] == [0, 5]
    assert game.node_ids == {1}

def test_validate_game_total_time():
    validate_game(10, [GameTargetInput(1, 0, 10)])
    validate_game(0, [])
    with pytest.raises(ValueError):
        validate_game(9, [GameTargetInput(1, 0, 10)])

def test_target_image_path():
    t = Target(node_id=1, distance=10.0, image_num=4)
    assert t.image_path.name == "ShootingTarget_graphics4.png"
    assert t.image_path.parent.name == "assets"

def test_game_does_not_reorder_callers_list():
    t = Target(node_id=1, distance=10.0, image_num=1)
    late = GameTarget(target=t, start_time=5, end_time=6)
    early = GameTarget(target=t, start_time=0, end_time=1)
    windows = [late, early]
    game = Game(name="g", total_time=10, targets=windows)
    assert windows == [late, early]
    assert game.targets == [early, late]

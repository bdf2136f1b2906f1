from echoarena.services.games import scoring


def test_flat_points_ignore_time():
    assert scoring.flat_points(None, 100, 10) == 100
    assert scoring.flat_points(9.5, 100, 10) == 100


def test_time_weighted_points():
    assert scoring.time_weighted_points(0, 100, 10) == 200
    assert scoring.time_weighted_points(5, 100, 10) == 150
    assert scoring.time_weighted_points(10, 100, 10) == 100
    assert scoring.time_weighted_points(30, 100, 10) == 100
    assert scoring.time_weighted_points(None, 100, 10) == 100
    assert scoring.time_weighted_points(3, 100, 0) == 100


def test_policy_follows_config(flask_app):
    assert scoring.points_for_correct_answer(2.0) == 100

    flask_app.config['SCORING_POLICY'] = 'time_weighted'
    assert scoring.points_for_correct_answer(2.0) == 180

    flask_app.config['SCORING_POLICY'] = 'unknown'
    assert scoring.points_for_correct_answer(2.0) == 100

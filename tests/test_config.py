from config import Settings


def test_defaults():
    settings = Settings()

    assert settings.smoother_min_cutoff == 1.7
    assert settings.smoother_beta == 0.01
    assert settings.interpolator_buffer_size == 3


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SWING_SMOOTHER_BETA", "0.02")
    monkeypatch.setenv("SWING_MODEL_COMPLEXITY", "2")

    settings = Settings()

    assert settings.smoother_beta == 0.02
    assert settings.model_complexity == 2

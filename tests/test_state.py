# Tests for state.py

from oauth2_client.state import generate_state, validate_state


def test_generate_state_unpredictable():
    states = {generate_state() for _ in range(100)}
    assert len(states) == 100
    assert all(len(s) == 32 for s in states)


def test_validate_exact_match():
    state = generate_state()
    assert validate_state(state, state) is True


def test_validate_rejects_mismatch():
    state = generate_state()
    assert validate_state(state, state.upper() + "x") is False
    assert validate_state(state, state[:-1]) is False
    assert validate_state(state, " " + state) is False


def test_validate_rejects_missing():
    assert validate_state(generate_state(), None) is False
    assert validate_state(generate_state(), "") is False
    assert validate_state("", "") is False

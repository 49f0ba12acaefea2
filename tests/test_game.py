import json

import pytest

import game
from game import GameEngine, MessageKind, format_time, pick_word
from settings import GameConfig
from state import GameState
from storage import InMemoryStore
from wordHandle import ABSENT, CORRECT, PRESENT

KEY = "word_guess_state"


def saved(store):
    return GameState.from_json(store.get_string(KEY))


def collect_messages(engine):
    messages = []
    engine.add_message_listener(messages.append)
    return messages


# --- Word picking & helpers ---

def test_pick_word_uses_clock_modulo_list_size():
    words = ("APPLE", "BRAVE", "CRANE")
    assert pick_word(words, now_ms=0) == "APPLE"
    assert pick_word(words, now_ms=7) == "BRAVE"
    assert pick_word(words) in words


def test_format_time():
    assert format_time(300) == "05:00"
    assert format_time(61) == "01:01"
    assert format_time(0) == "00:00"
    assert format_time(-4) == "00:00"


# --- new_game ---

def test_new_game_untimed(engine, store, clock):
    engine.new_game()
    snap = engine.snapshot()
    assert snap.target == "CRANE"
    assert snap.guesses == ()
    assert not snap.finished
    assert not snap.timed_mode
    assert snap.remaining_secs == 0
    assert not engine.timer_running
    assert clock.active_timers == 0
    assert saved(store) == GameState(target="CRANE")


def test_new_timed_game_starts_five_minute_countdown(engine, store, clock):
    engine.new_game(timed=True)
    assert engine.state.remaining_secs == 300
    assert engine.timer_running
    assert saved(store).timed_mode is True
    clock.advance(3)
    assert engine.state.remaining_secs == 297


def test_new_game_cancels_running_timer(engine, clock):
    engine.new_game(timed=True)
    engine.new_game(timed=False)
    clock.advance(10)
    assert clock.active_timers == 0
    assert engine.state.remaining_secs == 0


def test_new_game_resets_guesses_and_pause(engine):
    engine.new_game()
    engine.submit_guess("DANCE")
    engine.pause()
    engine.new_game()
    assert engine.state.guesses == []
    assert engine.paused is False
    assert engine.last_message is None


# --- submit_guess ---

@pytest.mark.parametrize("raw", ["", "CRAN", "CRANES", "   ", "AB CDE"])
def test_wrong_length_guess_changes_nothing(engine, store, raw):
    engine.new_game()
    writes = store.writes
    messages = collect_messages(engine)
    assert engine.submit_guess(raw) == game.INVALID_LENGTH
    assert engine.state.guesses == []
    assert store.writes == writes
    assert messages[-1].kind == MessageKind.ERROR
    assert messages[-1].text == "Guess must be 5 letters"


def test_guess_is_trimmed_and_uppercased(engine):
    engine.new_game()
    assert engine.submit_guess("  dance ") == game.NEXT_TURN
    assert engine.state.guesses == ["DANCE"]


def test_winning_guess(engine, store, clock):
    engine.new_game(timed=True)
    messages = collect_messages(engine)
    engine.submit_guess("DANCE")
    assert engine.submit_guess("crane") == game.WIN
    assert engine.state.finished
    assert messages[-1].kind == MessageKind.WIN
    assert messages[-1].text == "You won in 2 tries!"
    assert not engine.timer_running
    assert saved(store).finished is True
    remaining = engine.state.remaining_secs
    clock.advance(5)
    assert engine.state.remaining_secs == remaining


def test_six_misses_lose_and_seventh_is_ignored(engine, store):
    engine.new_game()
    messages = collect_messages(engine)
    results = [engine.submit_guess(w) for w in ["APPLE", "BRAVE", "DANCE", "EPOCH", "FLAME", "GHOST"]]
    assert results == [game.NEXT_TURN] * 5 + [game.LOSS]
    assert engine.state.finished
    assert messages[-1].kind == MessageKind.LOSS
    assert messages[-1].text == "Out of tries! Word: CRANE"

    writes = store.writes
    count = len(messages)
    assert engine.submit_guess("CRANE") == game.GAME_ENDED
    assert len(engine.state.guesses) == 6
    assert store.writes == writes
    assert len(messages) == count


def test_each_valid_guess_is_persisted(engine, store):
    engine.new_game()
    engine.submit_guess("DANCE")
    assert saved(store).guesses == ["DANCE"]


def test_snapshot_feedback(engine):
    engine.new_game()
    engine.submit_guess("DANCE")
    engine.submit_guess("CRANE")
    snap = engine.snapshot()
    assert snap.feedback[0] == (ABSENT, PRESENT, PRESENT, PRESENT, CORRECT)
    assert snap.feedback[1] == (CORRECT,) * 5
    assert snap.is_won
    assert snap.attempts_left == 4


def test_strict_feedback_config(store, clock):
    engine = GameEngine(store, clock, config=GameConfig(strict_feedback=True), picker=lambda w: "CRANE")
    engine.new_game()
    engine.submit_guess("EERIE")
    assert engine.snapshot().feedback[0] == (ABSENT, ABSENT, PRESENT, ABSENT, CORRECT)


def test_max_attempts_is_configurable(store, clock):
    engine = GameEngine(store, clock, config=GameConfig(max_attempts=2), picker=lambda w: "CRANE")
    engine.new_game()
    engine.submit_guess("APPLE")
    assert engine.submit_guess("BRAVE") == game.LOSS


# --- timer, pause & resume ---

def test_paused_tick_changes_nothing(engine, store, clock):
    engine.new_game(timed=True)
    clock.advance(1)
    engine.pause()
    writes = store.writes
    clock.advance(10)
    assert engine.state.remaining_secs == 299
    assert engine.timer_running
    assert store.writes == writes
    assert saved(store).remaining_secs == 299


def test_unpaused_tick_decrements_by_one(engine, store):
    engine.new_game(timed=True)
    engine.tick()
    assert engine.state.remaining_secs == 299
    assert saved(store).remaining_secs == 299


def test_resume_continues_without_reset(engine, clock):
    engine.new_game(timed=True)
    clock.advance(5)
    engine.pause()
    clock.advance(5)
    engine.resume()
    assert engine.paused is False
    assert engine.state.remaining_secs == 295
    clock.advance(2)
    assert engine.state.remaining_secs == 293
    assert clock.active_timers == 1


def test_resume_untimed_game_starts_no_timer(engine, clock):
    engine.new_game()
    engine.pause()
    engine.resume()
    assert not engine.timer_running
    assert clock.active_timers == 0


def test_timeout_on_last_second(store, clock):
    store.set_string(KEY, GameState(target="CRANE", timed_mode=True, remaining_secs=1).to_json())
    engine = GameEngine(store, clock)
    messages = collect_messages(engine)
    assert engine.load_saved()
    clock.advance(1)
    assert engine.state.finished
    assert engine.state.remaining_secs == 0
    assert not engine.timer_running
    assert messages[-1].kind == MessageKind.TIMEOUT
    assert messages[-1].text == "Time over! The word was CRANE"
    assert saved(store).finished is True


def test_timeout_never_goes_negative(engine, clock):
    engine.new_game(timed=True)
    clock.advance(400)
    assert engine.state.remaining_secs == 0
    assert engine.state.finished
    engine.tick()
    assert engine.state.remaining_secs == 0


def test_tick_ignored_for_untimed_game(engine):
    engine.new_game()
    engine.tick()
    assert engine.state.remaining_secs == 0
    assert not engine.state.finished


def test_enable_timed_mode(engine, store, clock):
    engine.new_game()
    engine.submit_guess("DANCE")
    engine.enable_timed_mode()
    assert engine.state.timed_mode
    assert engine.state.remaining_secs == 300
    assert engine.state.guesses == ["DANCE"]
    assert saved(store).timed_mode is True
    clock.advance(1)
    assert engine.state.remaining_secs == 299
    engine.enable_timed_mode()
    assert engine.state.remaining_secs == 299
    assert clock.active_timers == 1


def test_enable_timed_mode_on_finished_game_is_ignored(engine):
    engine.new_game()
    engine.submit_guess("CRANE")
    engine.enable_timed_mode()
    assert not engine.state.timed_mode
    assert not engine.timer_running


# --- load_saved / clear_saved / suspend ---

def test_load_without_blob_starts_fresh_game(engine, store):
    assert engine.load_saved() is False
    s = engine.state
    assert not s.timed_mode and not s.finished and s.remaining_secs == 0
    assert saved(store) == s


@pytest.mark.parametrize("raw", ["{broken", "[]", '{"guesses": []}', json.dumps({"target": "CRANE", "guesses": ["NO"]})])
def test_load_discards_malformed_blob(raw, clock, caplog):
    store = InMemoryStore({KEY: raw})
    engine = GameEngine(store, clock, picker=lambda w: "APPLE")
    assert engine.load_saved() is False
    assert engine.state == GameState(target="APPLE")
    assert saved(store) == GameState(target="APPLE")
    assert "Discarding saved game" in caplog.text


@pytest.mark.parametrize("guesses", [["DANCE"] * 6, ["DANCE", "CRANE"]])
def test_load_rejects_unfinished_blob_with_no_turns_left(guesses, clock):
    stored = GameState(target="CRANE", guesses=guesses, finished=False)
    store = InMemoryStore({KEY: stored.to_json()})
    engine = GameEngine(store, clock, picker=lambda w: "APPLE")
    assert engine.load_saved() is False
    assert engine.state == GameState(target="APPLE")
    engine.submit_guess("FLAME")
    assert len(engine.state.guesses) == 1


def test_load_rejects_string_flags(clock):
    store = InMemoryStore({KEY: '{"target": "CRANE", "guesses": [], "finished": "false", "timedMode": "false"}'})
    engine = GameEngine(store, clock, picker=lambda w: "APPLE")
    assert engine.load_saved() is False
    assert not engine.state.finished
    assert not engine.timer_running


def test_load_restores_fields(store, clock):
    stored = GameState(target="FLAME", guesses=["DANCE"], finished=False, timed_mode=False, remaining_secs=0)
    store.set_string(KEY, stored.to_json())
    engine = GameEngine(store, clock)
    assert engine.load_saved() is True
    assert engine.state == stored
    assert not engine.timer_running


def test_load_resumes_timed_game_without_reset(store, clock):
    store.set_string(KEY, GameState(target="FLAME", timed_mode=True, remaining_secs=42).to_json())
    engine = GameEngine(store, clock)
    engine.load_saved()
    assert engine.timer_running
    clock.advance(2)
    assert engine.state.remaining_secs == 40


def test_load_finished_timed_game_keeps_timer_stopped(store, clock):
    store.set_string(KEY, GameState(target="FLAME", finished=True, timed_mode=True, remaining_secs=0).to_json())
    engine = GameEngine(store, clock)
    engine.load_saved()
    assert not engine.timer_running


def test_clear_saved(engine, store, clock):
    engine.new_game(timed=True)
    engine.submit_guess("DANCE")
    messages = collect_messages(engine)
    engine.clear_saved()
    assert messages[-1].text == "Saved state cleared. Starting new game."
    assert engine.state == GameState(target="CRANE")
    assert saved(store) == GameState(target="CRANE")
    assert clock.active_timers == 0


def test_on_suspend_saves(engine, store):
    engine.new_game()
    engine.state.guesses.append("DANCE")
    engine.on_suspend()
    assert saved(store).guesses == ["DANCE"]


def test_close_stops_timer_and_saves(engine, store, clock):
    engine.new_game(timed=True)
    clock.advance(3)
    engine.close()
    engine.close()
    clock.advance(3)
    assert clock.active_timers == 0
    assert saved(store).remaining_secs == 297


# --- sharing ---

def test_share_text_in_progress(engine):
    engine.new_game()
    engine.submit_guess("DANCE")
    assert engine.share_score_text() == "Playing Word Guess - 1 tries so far."


def test_share_text_finished(engine, shared):
    engine.new_game()
    engine.submit_guess("DANCE")
    engine.submit_guess("CRANE")
    text = engine.share_score()
    assert text == "I solved the word in 2 tries in Word Guess!"
    assert shared == [text]


def test_share_without_target_is_noop(store, clock):
    engine = GameEngine(store, clock)
    engine.new_game()
    assert engine.share_score() == "Playing Word Guess - 0 tries so far."


def test_failing_share_target_is_logged(store, clock, caplog):
    def broken(text):
        raise RuntimeError("no share sheet")

    engine = GameEngine(store, clock, share=broken)
    engine.new_game()
    engine.share_score()
    assert "Share target failed" in caplog.text


# --- observation ---

def test_subscribers_receive_snapshots(engine):
    snaps = []
    unsubscribe = engine.subscribe(snaps.append)
    engine.new_game()
    engine.submit_guess("DANCE")
    assert snaps[-1].guesses == ("DANCE",)
    count = len(snaps)
    unsubscribe()
    unsubscribe()
    engine.submit_guess("FLAME")
    assert len(snaps) == count


def test_invalid_guess_notifies_with_message(engine):
    snaps = []
    engine.new_game()
    engine.subscribe(snaps.append)
    engine.submit_guess("NO")
    assert snaps[-1].last_message.kind == MessageKind.ERROR


def test_failing_listener_does_not_break_engine(engine, caplog):
    def broken(_):
        raise RuntimeError("listener bug")

    engine.subscribe(broken)
    engine.add_message_listener(broken)
    engine.new_game()
    engine.submit_guess("CRANE")
    assert engine.state.finished
    assert "State listener failed" in caplog.text
    assert "Message listener failed" in caplog.text


def test_snapshot_is_immutable(engine):
    engine.new_game()
    snap = engine.snapshot()
    with pytest.raises(AttributeError):
        snap.finished = True

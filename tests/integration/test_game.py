"""完整对局测试"""
import pytest

from core.cards import FULL_DECK, THREE_OF_SPADES
from core.config import GameConfig
from core.events import PlayAccepted, PlayerPassed, RoundReset, GameEnded, TurnChanged
from core.rules import RuleEngine
from core.session import GameSession


class EventRecorder:
    """记录事件并检查出牌序列"""

    def __init__(self):
        self.events = []
        self.table = []
        self.violations = []

    def __call__(self, event):
        self.events.append(event)
        if isinstance(event, PlayAccepted):
            if event.opened_round != (not self.table):
                self.violations.append(f"opened_round mismatch: {event}")
            if self.table and not RuleEngine.beats(event.cards, self.table):
                self.violations.append(f"{event.cards} does not beat {self.table}")
            self.table = list(event.cards)
        elif isinstance(event, RoundReset):
            self.table = []


@pytest.mark.parametrize("strategy", ["simple", "scored"])
@pytest.mark.parametrize("seed", range(10))
def test_ai_game_invariants(strategy, seed):
    recorder = EventRecorder()
    session = GameSession(GameConfig(seed=seed, strategy=strategy, strict=True), listeners=[recorder])
    session.start()
    winner = session.run()

    assert session.is_over
    assert recorder.violations == []

    # 牌数守恒
    remaining = [c for hand in session.hands for c in hand]
    played = [c for cards in session.played_cards for c in cards]
    assert sorted(remaining + played) == list(FULL_DECK)

    # 首手包含 3♠
    first_play = next(e for e in recorder.events if isinstance(e, PlayAccepted))
    assert THREE_OF_SPADES in first_play.cards

    # 只有一个 GameEnded 且在最后
    ended = [e for e in recorder.events if isinstance(e, GameEnded)]
    assert ended == [GameEnded(winner)]
    assert recorder.events[-1] == GameEnded(winner)

    assert session.rounds == sum(isinstance(e, RoundReset) for e in recorder.events)
    assert session.plies == sum(
        isinstance(e, (PlayAccepted, PlayerPassed)) for e in recorder.events
    )


def test_mixed_strategies():
    session = GameSession(GameConfig(seed=99, seat_strategies={0: "scored", 2: "scored"}))
    session.start()
    winner = session.run()

    assert 0 <= winner < 4
    assert session.hands[winner].is_empty


def test_round_winner_leads():
    recorder = EventRecorder()
    session = GameSession(GameConfig(seed=21), listeners=[recorder])
    session.start()
    session.run()

    for i, event in enumerate(recorder.events):
        if isinstance(event, RoundReset):
            assert recorder.events[i + 1] == TurnChanged(event.leader)
            later = next(e for e in recorder.events[i + 1:] if isinstance(e, PlayAccepted))
            assert later.player == event.leader
            assert later.opened_round


def test_two_player_game():
    session = GameSession(GameConfig(num_players=2, seed=4))
    session.start()
    assert all(len(hand) == 26 for hand in session.hands)
    winner = session.run()
    assert winner in (0, 1)

"""
对局会话

显式的对局编排对象 (取代全局单例):
- 持有手牌、GameState、各座位策略与事件监听器
- 人类出牌与 AI 出牌走同一套校验与应用流程
- 每次调用返回 PlayResult (校验结果 + 本次产生的事件)
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Iterable, Sequence, Tuple, Union
import logging

from .cards import Card, THREE_OF_SPADES
from .deck import Hand, new_shuffled_deck
from .actions import Combo, ComboGenerator
from .rules import RuleEngine, PlayVerdict, RejectReason
from .state import GameState
from .decision import DecisionEngine, Strategy
from .config import GameConfig
from .events import (
    GameEvent,
    EventListener,
    TurnChanged,
    PlayAccepted,
    PlayerPassed,
    RoundReset,
    GameEnded,
)

logger = logging.getLogger(__name__)


@dataclass
class PlayResult:
    """
    一次出牌/过牌请求的结果

    Attributes:
        verdict: 校验结果
        events: 本次产生的事件 (被拒绝时为空)
        cards: 实际出的牌 (过牌为空)
    """
    verdict: PlayVerdict
    events: List[GameEvent] = field(default_factory=list)
    cards: Tuple[Card, ...] = ()

    @property
    def accepted(self) -> bool:
        return self.verdict.accepted

    @property
    def is_pass(self) -> bool:
        return self.accepted and not self.cards


class GameSession:
    """
    对局会话

    单线程使用；GameState 与手牌只由会话修改
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        strategies: Optional[Dict[int, Union[str, Strategy]]] = None,
        listeners: Optional[Iterable[EventListener]] = None,
    ):
        """
        Args:
            config: 对局配置
            strategies: 按座位指定的策略 (名称或实例)，未指定的座位使用配置中的策略
            listeners: 事件监听器
        """
        self.config = config or GameConfig()
        self._strategy_overrides = dict(strategies or {})
        self._engines: Dict[int, DecisionEngine] = {}
        self.listeners: List[EventListener] = list(listeners or [])

        self.hands: List[Hand] = []
        self.state: Optional[GameState] = None
        self.events: List[GameEvent] = []
        self.history: List[Tuple[int, Tuple[Card, ...]]] = []
        self.played_cards: List[List[Card]] = []

        self.plies = 0
        self.rounds = 0
        self.bombs = 0

    # ------------------------------------------------------------------
    # 对局生命周期
    # ------------------------------------------------------------------

    def start(self, hands: Optional[Sequence[Iterable[Card]]] = None) -> List[GameEvent]:
        """
        开局: 发牌，并由持有 3♠ 的玩家先出

        Args:
            hands: 指定各玩家手牌 (测试/复盘用)，None 时按配置洗牌发牌

        Returns:
            开局事件
        """
        num_players = self.config.num_players
        previous = self.hands

        if hands is not None:
            if len(hands) != num_players:
                raise ValueError(f"Expected {num_players} hands, got {len(hands)}")
            self.hands = [Hand(cards) for cards in hands]
            all_cards = [c for hand in self.hands for c in hand]
            if len(set(all_cards)) != len(all_cards):
                raise ValueError("A card cannot be dealt to more than one hand")
        else:
            deck = new_shuffled_deck(self.config.seed)
            self.hands = deck.deal(num_players)

        # 重开时清空上一局的手牌对象
        for hand in previous:
            hand.clear()

        leader = next(
            (i for i, hand in enumerate(self.hands) if THREE_OF_SPADES in hand),
            0,
        )

        self.state = GameState(
            num_players=num_players,
            current_player=leader,
            strict=self.config.strict,
        )
        self.events = []
        self.history = []
        self.played_cards = [[] for _ in range(num_players)]
        self.plies = 0
        self.rounds = 0
        self.bombs = 0

        logger.debug("Game started, player %d leads", leader)
        events: List[GameEvent] = [TurnChanged(leader)]
        self._emit(events)
        return events

    @property
    def current_player(self) -> int:
        return self._require_state().current_player

    @property
    def winner(self) -> int:
        return self._require_state().winner

    @property
    def is_over(self) -> bool:
        return self.state is not None and self.state.game_over

    def cards_left(self) -> List[int]:
        return [len(hand) for hand in self.hands]

    # ------------------------------------------------------------------
    # 出牌 / 过牌
    # ------------------------------------------------------------------

    def play(self, player: int, cards: Iterable[Card]) -> PlayResult:
        """
        玩家出牌

        Args:
            player: 出牌玩家
            cards: 选中的牌

        Returns:
            PlayResult，被拒绝时状态不变
        """
        state = self._require_state()
        cards = list(cards)

        verdict = self._check_turn(player)
        if verdict.accepted:
            verdict = RuleEngine.validate_play(
                cards,
                self.hands[player],
                state.table_combo,
                state.is_first_turn_of_game,
            )
        if not verdict.accepted:
            logger.debug("Player %d play rejected (%s): %s", player, verdict.reason.value, verdict.message)
            return PlayResult(verdict)

        combo = Combo.from_cards(cards)
        opened_round = state.is_round_open

        self.hands[player].remove_cards(combo.cards)
        state.set_table_combo(combo.cards)
        state.mark_player_played()
        state.is_first_turn_of_game = False

        self.plies += 1
        self.history.append((player, combo.cards))
        self.played_cards[player].extend(combo.cards)
        if combo.is_bomb:
            self.bombs += 1

        logger.debug("Player %d plays %s (%s)", player, combo, combo.combo_type.name)
        events: List[GameEvent] = [PlayAccepted(player, combo.cards, combo.combo_type, opened_round)]

        if self.hands[player].is_empty:
            # 第一个出完牌的玩家立即获胜
            state.mark_player_inactive(player)
            state.declare_winner(player)
            logger.info("Player %d wins after %d plies", player, self.plies)
            events.append(GameEnded(player))
        else:
            state.next_player()
            events.append(TurnChanged(state.current_player))

        self._emit(events)
        return PlayResult(verdict, events, combo.cards)

    def pass_turn(self, player: int) -> PlayResult:
        """
        玩家过牌

        若其余在局玩家都已过牌，本轮结束，最后出牌者领出下一轮

        Args:
            player: 过牌玩家

        Returns:
            PlayResult
        """
        state = self._require_state()

        verdict = self._check_turn(player)
        if verdict.accepted:
            verdict = RuleEngine.validate_pass(state.table_combo)
        if not verdict.accepted:
            logger.debug("Player %d pass rejected (%s)", player, verdict.reason.value)
            return PlayResult(verdict)

        state.mark_player_passed()
        self.plies += 1
        self.history.append((player, ()))
        events: List[GameEvent] = [PlayerPassed(player)]

        if state.all_others_passed():
            leader = state.last_player_to_play
            state.reset_round()
            state.current_player = leader
            self.rounds += 1
            logger.debug("Round %d won by player %d", self.rounds, leader)
            events.append(RoundReset(leader))
            events.append(TurnChanged(leader))
        else:
            state.next_player()
            events.append(TurnChanged(state.current_player))

        self._emit(events)
        return PlayResult(verdict, events)

    def submit(self, player: int, cards: Iterable[Card]) -> PlayResult:
        """出牌或过牌 (空牌列表表示过牌)"""
        cards = list(cards)
        if cards:
            return self.play(player, cards)
        return self.pass_turn(player)

    # ------------------------------------------------------------------
    # AI
    # ------------------------------------------------------------------

    def engine_for(self, seat: int) -> DecisionEngine:
        """获取座位对应的决策引擎"""
        if seat not in self._engines:
            strategy = self._strategy_overrides.get(seat, self.config.strategy_for(seat))
            self._engines[seat] = DecisionEngine(strategy)
        return self._engines[seat]

    def step_ai(self) -> PlayResult:
        """
        由当前玩家的策略决定并执行一步

        Raises:
            RuntimeError: 策略给出了非法出牌
        """
        state = self._require_state()
        if state.game_over:
            return PlayResult(PlayVerdict.reject(RejectReason.GAME_OVER, "game is over"))

        player = state.current_player
        engine = self.engine_for(player)
        cards = engine.decide_play(self.hands[player].cards, state, state.is_first_turn_of_game)

        result = self.submit(player, cards)
        if not result.accepted:
            raise RuntimeError(
                f"Strategy {engine.strategy!r} produced an illegal move for player {player}: "
                f"{result.verdict.message}"
            )
        return result

    def run(self, max_steps: Optional[int] = None) -> int:
        """
        全 AI 自动对局直到结束

        Args:
            max_steps: 最大步数，None 时使用配置

        Returns:
            赢家，超过步数仍未结束返回 -1
        """
        if self.state is None:
            self.start()
        max_steps = max_steps if max_steps is not None else self.config.max_steps

        for _ in range(max_steps):
            if self.is_over:
                break
            self.step_ai()

        if not self.is_over:
            logger.warning("Game did not finish within %d steps", max_steps)
        return self.winner

    def legal_actions(self, player: Optional[int] = None) -> List[Combo]:
        """
        列出玩家当前所有合法出牌 (跟牌时包含过牌，即空 Combo)

        Args:
            player: 玩家，None 表示当前玩家
        """
        state = self._require_state()
        if state.game_over:
            return []
        player = state.current_player if player is None else player
        hand = self.hands[player].cards

        table = Combo.from_cards(state.table_combo)
        actions = ComboGenerator(hand).generate_responses(None if table.is_pass else table)

        if state.is_first_turn_of_game and THREE_OF_SPADES in hand:
            actions = [a for a in actions if THREE_OF_SPADES in a.cards]
        if not table.is_pass:
            actions.insert(0, Combo.pass_combo())
        return actions

    # ------------------------------------------------------------------
    # 内部
    # ------------------------------------------------------------------

    def _check_turn(self, player: int) -> PlayVerdict:
        state = self._require_state()
        if state.game_over:
            return PlayVerdict.reject(RejectReason.GAME_OVER, "game is over")
        if player != state.current_player:
            return PlayVerdict.reject(
                RejectReason.NOT_YOUR_TURN,
                f"it is player {state.current_player}'s turn",
            )
        return PlayVerdict.ok()

    def _require_state(self) -> GameState:
        if self.state is None:
            raise RuntimeError("Game not started. Call start() first.")
        return self.state

    def _emit(self, events: List[GameEvent]) -> None:
        self.events.extend(events)
        for event in events:
            for listener in self.listeners:
                listener(event)

#!/usr/bin/env python3
"""
对战脚本

Usage:
    python scripts/play.py --mode watch               # 观看 AI 对战
    python scripts/play.py --mode play                # 与 AI 对战
    python scripts/play.py --mode watch --strategy scored --seed 7
"""
import argparse
import logging
import sys
from pathlib import Path
import time

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core.cards import cards_to_str, str_to_cards
from core.config import GameConfig
from core.decision import StrategyRegistry
from core.events import GameEvent, PlayAccepted, PlayerPassed, RoundReset, GameEnded
from core.session import GameSession

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Tien Len Play")

    parser.add_argument(
        "--mode",
        type=str,
        default="watch",
        choices=["watch", "play"],
        help="Mode: watch AI or play against AI",
    )
    parser.add_argument(
        "--strategy",
        type=str,
        default="simple",
        choices=StrategyRegistry.get_instance().list_strategies(),
        help="AI strategy",
    )
    parser.add_argument("--seat", type=int, default=0, help="Human seat in play mode")
    parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")
    parser.add_argument("--delay", type=float, default=0.5, help="Delay between moves")
    parser.add_argument("--games", type=int, default=1, help="Number of games")
    parser.add_argument("--debug", action="store_true", help="Show engine debug logs")

    return parser.parse_args()


def print_event(event: GameEvent):
    """打印对局事件"""
    if isinstance(event, PlayAccepted):
        prefix = "领出" if event.opened_round else "出牌"
        print(f"玩家 {event.player} {prefix}: {cards_to_str(event.cards)} ({event.combo_type.name})")
    elif isinstance(event, PlayerPassed):
        print(f"玩家 {event.player} 过牌")
    elif isinstance(event, RoundReset):
        print(f"--- 本轮结束，玩家 {event.leader} 领出 ---")
    elif isinstance(event, GameEnded):
        print(f"\n游戏结束! 胜者: 玩家 {event.winner}")


def print_game_state(session: GameSession, seat: int):
    """打印游戏状态"""
    state = session.state

    print("\n" + "=" * 60)
    print(f"当前玩家: {state.current_player}")
    print("-" * 60)

    for player, hand in enumerate(session.hands):
        if player == seat:
            print(f"[{player}] 手牌 ({len(hand)}): {cards_to_str(hand)}")
        else:
            print(f" {player}  手牌数: {len(hand)}")

    if state.table_combo:
        print(f"\n桌面: {cards_to_str(state.table_combo)} (玩家 {state.last_player_to_play})")

    print("=" * 60)


def make_config(args, game_idx: int) -> GameConfig:
    seed = None if args.seed is None else args.seed + game_idx
    return GameConfig(seed=seed, strategy=args.strategy)


def watch_game(args):
    """观看 AI 对战"""
    for game_idx in range(args.games):
        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print("=" * 60)

        session = GameSession(make_config(args, game_idx), listeners=[print_event])
        session.start()

        while not session.is_over and session.plies < session.config.max_steps:
            session.step_ai()
            time.sleep(args.delay)

        print(f"总步数: {session.plies}, 轮数: {session.rounds}, 炸弹: {session.bombs}")


def read_move(session: GameSession, seat: int):
    """
    读取玩家输入

    Returns:
        牌列表 (空表示过牌)，None 表示退出
    """
    while True:
        text = input("\n出牌 (如 '3S 3C'，'p' 过牌，'h' 提示，'q' 退出): ").strip()
        if text.lower() == "q":
            return None
        if text.lower() in ("p", "pass", ""):
            return []
        if text.lower() == "h":
            actions = session.legal_actions(seat)
            for i, action in enumerate(actions[:20]):  # 只显示前20个
                print(f"  {i}: {action}")
            if len(actions) > 20:
                print(f"  ... 还有 {len(actions) - 20} 个动作")
            continue
        try:
            return str_to_cards(text)
        except ValueError as e:
            print(f"无法解析: {e}")


def play_game(args):
    """与 AI 对战"""
    seat = args.seat

    for game_idx in range(args.games):
        print(f"\n{'='*60}")
        print(f"Game {game_idx + 1}/{args.games}")
        print(f"你是玩家 {seat}!")
        print("=" * 60)

        session = GameSession(make_config(args, game_idx), listeners=[print_event])
        session.start()

        while not session.is_over:
            if session.current_player != seat:
                session.step_ai()
                time.sleep(args.delay)
                continue

            print_game_state(session, seat)
            cards = read_move(session, seat)
            if cards is None:
                print("退出游戏")
                return

            result = session.submit(seat, cards)
            if not result.accepted:
                print(f"不合法: {result.verdict.message}")

        if session.winner == seat:
            print("恭喜你赢了!")
        else:
            print("你输了!")


def main():
    args = parse_args()
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    print("=" * 60)
    print("Tien Len 进级")
    print("=" * 60)

    if args.mode == "watch":
        watch_game(args)
    elif args.mode == "play":
        play_game(args)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
评估脚本

Usage:
    python scripts/evaluate.py --strategy scored --games 100
    python scripts/evaluate.py --compare --strategy1 scored --strategy2 simple
    python scripts/evaluate.py --tournament --strategies simple scored --games 20
"""
import argparse
import logging
import sys
from pathlib import Path
import json

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core.config import GameConfig
from core.decision import StrategyRegistry
from evaluation import (
    Evaluator,
    RandomAgent,
    StrategyAgent,
    Arena,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    strategies = StrategyRegistry.get_instance().list_strategies()
    parser = argparse.ArgumentParser(description="Tien Len Evaluation")

    # 模式
    parser.add_argument("--compare", action="store_true", help="Compare two strategies")
    parser.add_argument("--tournament", action="store_true", help="Run tournament")

    # 策略
    parser.add_argument("--strategy", type=str, choices=strategies, help="Strategy for evaluation")
    parser.add_argument("--strategy1", type=str, choices=strategies, help="First strategy for comparison")
    parser.add_argument("--strategy2", type=str, choices=strategies, help="Second strategy for comparison")
    parser.add_argument("--strategies", nargs="+", type=str, help="Strategies for tournament")

    # 评估参数
    parser.add_argument("--games", type=int, default=100, help="Number of games")
    parser.add_argument(
        "--opponent",
        type=str,
        default="random",
        choices=["random"] + strategies,
        help="Opponent type",
    )

    # 其他
    parser.add_argument("--seed", type=int, default=None, help="Base shuffle seed")
    parser.add_argument("--output", type=str, help="Output file for results")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    return parser.parse_args()


def make_opponent(kind: str, idx: int, seed=None):
    if kind == "random":
        return RandomAgent(f"random{idx}", seed=None if seed is None else seed + idx)
    return StrategyAgent(kind, name=f"{kind}{idx}")


def evaluate_single(args):
    """评估单个策略"""
    logger.info(f"Evaluating strategy: {args.strategy}")

    config = GameConfig(seed=args.seed)
    agent = StrategyAgent(args.strategy)
    opponents = [make_opponent(args.opponent, i, args.seed) for i in range(config.num_players - 1)]

    evaluator = Evaluator(config)
    result = evaluator.evaluate(
        agent=agent,
        n_games=args.games,
        opponents=opponents,
        verbose=args.verbose,
    )

    logger.info("=" * 50)
    logger.info("Evaluation Results")
    logger.info("=" * 50)
    logger.info(f"Win Rate: {result.win_rate:.2%}")
    logger.info(
        f"Average Length: {result.avg_length:.1f} "
        f"(std {result.extra_stats.get('plies_std', 0.0):.1f})"
    )
    logger.info(f"Average Rounds: {result.avg_rounds:.1f}")
    logger.info(f"Average Cards Left: {result.avg_cards_left:.2f}")
    logger.info(f"Bomb Rate: {result.bomb_rate:.2f}")
    logger.info("=" * 50)

    if args.output:
        with open(args.output, "w") as f:
            json.dump({
                "win_rate": result.win_rate,
                "avg_length": result.avg_length,
                "avg_rounds": result.avg_rounds,
                "avg_cards_left": result.avg_cards_left,
                "bomb_rate": result.bomb_rate,
                "games_played": result.games_played,
                "spread": result.extra_stats,
            }, f, indent=2)
        logger.info(f"Results saved to {args.output}")

    return result


def compare_strategies(args):
    """比较两个策略"""
    logger.info(f"Comparing strategies: {args.strategy1} vs {args.strategy2}")

    agent1 = StrategyAgent(args.strategy1, name=f"{args.strategy1}_1")
    agent2 = StrategyAgent(args.strategy2, name=f"{args.strategy2}_2")

    evaluator = Evaluator(GameConfig(seed=args.seed))
    result = evaluator.compare(agent1, agent2, n_games=args.games)

    logger.info("=" * 50)
    logger.info("Comparison Results")
    logger.info("=" * 50)
    logger.info(f"Strategy 1 wins: {result['agent1_wins']} ({result['agent1_win_rate']:.2%})")
    logger.info(f"Strategy 2 wins: {result['agent2_wins']} ({result['agent2_win_rate']:.2%})")
    logger.info("=" * 50)

    if args.output:
        with open(args.output, "w") as f:
            json.dump(result, f, indent=2)

    return result


def run_tournament(args):
    """运行锦标赛"""
    logger.info(f"Running tournament with {len(args.strategies)} strategies")

    agents = [StrategyAgent(name, name=f"{name}_{i}") for i, name in enumerate(args.strategies)]

    # 添加基线智能体
    agents.append(RandomAgent("random", seed=args.seed))

    arena = Arena(GameConfig(seed=args.seed), seed=args.seed)
    result = arena.tournament(agents, n_rounds=args.games)

    logger.info("=" * 50)
    logger.info("Tournament Results")
    logger.info("=" * 50)

    ranking = result.get_ranking()
    for i, (name, win_rate) in enumerate(ranking):
        logger.info(f"{i+1}. {name}: {win_rate:.2%}")

    logger.info("=" * 50)

    summary = arena.collector.compute_metrics()
    logger.info(f"Average length: {summary.get('avg_length', 0.0):.1f}")
    logger.info(f"Games with bombs: {summary.get('bomb_rate', 0.0):.2%}")

    if args.output:
        with open(args.output, "w") as f:
            json.dump({
                "rankings": ranking,
                "total_games": result.total_games,
                "summary": {k: float(v) for k, v in summary.items()},
            }, f, indent=2)

    return result


def main():
    args = parse_args()

    if args.tournament and args.strategies:
        run_tournament(args)
    elif args.compare and args.strategy1 and args.strategy2:
        compare_strategies(args)
    elif args.strategy:
        evaluate_single(args)
    else:
        logger.error("Please specify --strategy, --compare with --strategy1/--strategy2, or --tournament with --strategies")
        sys.exit(1)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
对战脚本

Usage:
    python scripts/play.py --mode watch                 # 观看 AI 对战
    python scripts/play.py --mode play --players 3      # 与 AI 对战
    python scripts/play.py --mode bench --games 100     # 多局统计
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List
import time

# 添加项目根目录到路径
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from core.actions import Action, ActionGenerator, ActionType, perform
from core.cards import cards_to_str
from core.config import GameConfig
from core.errors import GameError
from core.rules import RuleEngine
from core.session import GameSession
from core.state import RoundState
from evaluation import Agent, Arena, GreedyAgent, RandomAgent

logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Sea Salt & Paper Play")

    parser.add_argument(
        "--mode",
        type=str,
        default="watch",
        choices=["watch", "play", "bench"],
        help="Mode: watch AI, play against AI, or benchmark agents",
    )
    parser.add_argument("--players", type=int, default=2, choices=[2, 3, 4], help="Number of players")
    parser.add_argument(
        "--agent",
        type=str,
        default="greedy",
        choices=["random", "greedy"],
        help="AI agent type",
    )
    parser.add_argument("--games", type=int, default=1, help="Number of games")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--delay", type=float, default=0.5, help="Delay between moves")
    parser.add_argument("--max-rounds", type=int, default=100)
    parser.add_argument("--verbose", action="store_true", help="Log engine transitions")

    return parser.parse_args()


def action_to_str(state: RoundState, action: Action) -> str:
    """动作转字符串"""
    if action.action_type == ActionType.DRAW:
        return f"抽牌 (留第 {action.keep_choice + 1} 张, 弃到 {action.pile_index + 1} 号堆)"
    if action.action_type == ActionType.TAKE_DISCARD:
        return f"拿 {action.pile_index + 1} 号弃牌堆"
    if action.action_type == ActionType.PLAY_PAIR:
        hand = state.current_player.hand
        i, j = action.pair
        target = ""
        if action.effect_args and action.effect_args.victim_index is not None:
            target = f" -> {state.players[action.effect_args.victim_index].name}"
        return f"配对 {cards_to_str([hand[i], hand[j]])}{target}"
    if action.action_type == ActionType.DECLARE:
        return f"宣告 ({action.declaration.value})"
    return "结束回合"


def print_game_state(state: RoundState, viewer: int):
    """打印局面"""
    print("\n" + "=" * 60)
    print(state.round_summary())
    print("-" * 60)

    for i, player in enumerate(state.players):
        score = RuleEngine.calculate_hand_score(player.hand, False)
        marker = ">" if i == state.current_player_index else " "
        if i == viewer:
            print(f"{marker}[{player.name}] {player.score}分 手牌: {cards_to_str(player.hand)} (同色 {score.color_bonus})")
        else:
            print(f"{marker} {player.name}  {player.score}分 手牌数: {len(player.hand)}")

    tops = [cards_to_str(pile[-1:]) for pile in state.discard_piles]
    print(f"\n牌组: {len(state.deck)} 张 | 弃牌堆: {tops[0]} / {tops[1]}")
    print("=" * 60)


def create_agents(args, count: int, prefix: str = "AI") -> List[Agent]:
    """创建智能体"""
    agents = []
    for i in range(count):
        if args.agent == "greedy":
            agents.append(GreedyAgent(f"{prefix}_{i}"))
        else:
            seed = None if args.seed is None else args.seed + i
            agents.append(RandomAgent(f"{prefix}_{i}", seed=seed))
    return agents


def print_round_result(session: GameSession, previous) -> bool:
    """上一动作结束了一轮 (含终局那一轮) 时打印该轮结果"""
    summary = session.last_round
    if summary is None or summary is previous:
        return False
    outcome = "获胜" if summary["isDeclarerWinner"] else "失败"
    print(f"\n第 {summary['roundNumber'] + 1} 轮结束, 宣告者{outcome}, 得分 {summary['points']}")
    return True


def run_game(args, human_seat: int = -1):
    """进行一局，human_seat 为 -1 时全部由 AI 操作"""
    config = GameConfig(seed=args.seed, max_rounds=args.max_rounds)
    names = ["你" if i == human_seat else f"AI_{i}" for i in range(args.players)]
    session = GameSession.from_names(names, config)
    session.start()
    agents = create_agents(args, args.players)

    viewer = human_seat if human_seat >= 0 else 0

    while not session.is_finished:
        state = session.state
        current = state.current_player_index
        legal_actions = ActionGenerator(state, config.declare_threshold).generate_all()

        if current == human_seat:
            print_game_state(state, viewer)
            print("\n可选动作:")
            for i, action in enumerate(legal_actions):
                print(f"  {i}: {action_to_str(state, action)}")
            while True:
                choice = input("\n请选择动作编号 (或输入 'q' 退出): ")
                if choice.lower() == 'q':
                    print("退出游戏")
                    return
                if choice.isdigit() and int(choice) < len(legal_actions):
                    action = legal_actions[int(choice)]
                    break
                print("无效选择，请重试")
        else:
            action = agents[current].act(state, legal_actions)
            if human_seat < 0:
                print_game_state(state, current)
            print(f"\n{state.current_player.name}: {action_to_str(state, action)}")
            time.sleep(args.delay)

        previous = session.last_round
        try:
            perform(session, state.current_player.player_id, action)
        except GameError as e:
            print(f"动作无效: {e}")
            continue

        print_round_result(session, previous)

    winner = session.winner
    print("\n" + "=" * 60)
    print(f"游戏结束! 胜者: {winner.name} ({winner.score}分)")
    for player_id, score in session.final_scores.items():
        print(f"  {player_id}: {score}")
    print("=" * 60)


def bench(args):
    """多局统计"""
    arena = Arena(GameConfig(max_rounds=args.max_rounds))
    agents = create_agents(args, args.players, prefix=args.agent)
    result = arena.play_many(agents, n_games=args.games, seed=args.seed)
    logger.info(repr(result))


def main():
    args = parse_args()
    if args.verbose:
        logging.getLogger("core").setLevel(logging.DEBUG)

    print("=" * 60)
    print("海盐与纸牌 Sea Salt & Paper")
    print("=" * 60)

    if args.mode == "bench":
        bench(args)
        return

    for game_idx in range(args.games):
        print(f"\nGame {game_idx + 1}/{args.games}")
        run_game(args, human_seat=0 if args.mode == "play" else -1)


if __name__ == "__main__":
    main()

"""Betting policy and table talk for NPC baccarat players."""

from enum import Enum
from random import Random

from tablegames.players import NpcProfile
from tablegames.baccarat.state import BaccaratBet, BaccaratResult, BetType

# Weights for the main bet, tuned to the real-world banker/player/tie odds
BANKER_SHARE = 0.55
PLAYER_SHARE = 0.40

PAIR_BET_CHANCE = 0.10

# Round winnings of at least this multiple of the stake count as a big win
BIG_WIN_MULTIPLE = 5


class QuoteEvent(Enum):
    """Table moments an NPC has something special to say about."""

    NATURAL = "NATURAL"
    TIE = "TIE"
    BIG_WIN = "BIG_WIN"
    PAIR = "PAIR"
    WAITING = "WAITING"


# Lines every NPC shares; WAITING lines come from the NPC's own profile
SPECIAL_QUOTES: dict[QuoteEvent, tuple[str, ...]] = {
    QuoteEvent.NATURAL: ("天牌！", "例牌！漂亮！", "八九不離十！"),
    QuoteEvent.TIE: ("和局！", "竟然和了！", "打成平手！"),
    QuoteEvent.BIG_WIN: ("大贏！", "發了！", "運氣真好！"),
    QuoteEvent.PAIR: ("對子！", "中對子了！", "雙雙對對！"),
}

_BACKED_BET = {
    BaccaratResult.BANKER_WIN: BetType.BANKER,
    BaccaratResult.PLAYER_WIN: BetType.PLAYER,
    BaccaratResult.TIE: BetType.TIE,
}


def calculate_ai_bet(chips: int, min_bet: int, rng: Random) -> list[BaccaratBet]:
    """
    Choose an NPC's bets for one coup.

    The main stake is 5-15% of chips rounded down to a multiple of the
    minimum bet (never below it). Banker gets 55% of main bets, player 40%,
    tie 5% at half stake. One time in ten a minimum pair side bet is added
    when chips allow.
    """
    if chips < min_bet:
        return []

    ratio = 0.05 + rng.random() * 0.10
    stake = max(min_bet, int(chips * ratio / min_bet) * min_bet)

    bets: list[BaccaratBet] = []
    roll = rng.random()
    if roll < BANKER_SHARE:
        bets.append(BaccaratBet(BetType.BANKER, stake))
    elif roll < BANKER_SHARE + PLAYER_SHARE:
        bets.append(BaccaratBet(BetType.PLAYER, stake))
    else:
        bets.append(BaccaratBet(BetType.TIE, max(min_bet, stake // 2)))

    if rng.random() < PAIR_BET_CHANCE and chips >= stake + min_bet:
        pair_type = BetType.BANKER_PAIR if rng.random() < 0.5 else BetType.PLAYER_PAIR
        bets.append(BaccaratBet(pair_type, min_bet))

    return bets


def get_ai_quote(
    result: BaccaratResult,
    bets: list[BaccaratBet],
    profile: NpcProfile,
    rng: Random,
) -> str:
    """Pick a WIN or LOSE line depending on whether the NPC backed the winner."""
    won = any(bet.type == _BACKED_BET[result] for bet in bets)
    lines = profile.lines("WIN" if won else "LOSE")
    return rng.choice(lines) if lines else ""


def reaction_event(
    result: BaccaratResult,
    bets: list[BaccaratBet],
    winnings: int,
    natural: bool,
    banker_pair: bool = False,
    player_pair: bool = False,
) -> QuoteEvent | None:
    """
    The special moment an NPC reacts to after a coup, if any.

    In order of precedence: a winning pair bet, winnings of at least
    ``BIG_WIN_MULTIPLE`` times the stake, a natural on the side the NPC
    backed, and a tie that pushed the NPC's main bet.
    """
    bet_types = {bet.type for bet in bets}
    if (banker_pair and BetType.BANKER_PAIR in bet_types) or (
        player_pair and BetType.PLAYER_PAIR in bet_types
    ):
        return QuoteEvent.PAIR

    stake = sum(bet.amount for bet in bets)
    if stake and winnings >= stake * BIG_WIN_MULTIPLE:
        return QuoteEvent.BIG_WIN

    backed_winner = _BACKED_BET[result] in bet_types
    if natural and backed_winner:
        return QuoteEvent.NATURAL
    if result == BaccaratResult.TIE and not backed_winner:
        return QuoteEvent.TIE
    return None


def get_baccarat_quote(event: QuoteEvent, profile: NpcProfile, rng: Random) -> str:
    """Pick a line for a special table moment."""
    if event == QuoteEvent.WAITING:
        lines = profile.lines(QuoteEvent.WAITING.value)
    else:
        lines = SPECIAL_QUOTES[event]
    return rng.choice(lines) if lines else ""

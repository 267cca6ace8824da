"""Plain-text (Discord markdown) renderers for the reports."""

from lp_recap.schemas.records import GameKind, MatchRecord, ParticipantSummary, TrackingEntry
from lp_recap.services.rank_history_service import NoSnapshots
from lp_recap.services.rank_utils import Rank
from lp_recap.services.recap_service import RecapReport, WinrateReport

WIN = "✅"
LOSS = "❌"
REMAKE = "🔄"
TRENDING_UP = "📈"
TRENDING_DOWN = "📉"
HOT_STREAK = "🔥"

PLACEMENT_MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}

QUEUE_NAMES = {
    420: "Ranked Solo/Duo",
    440: "Ranked Flex",
    1090: "Normal TFT",
    1100: "Ranked TFT",
    1130: "Hyper Roll",
    1160: "Double Up",
}


def format_delta(delta: int) -> str:
    """Signed LP change: ``+12``, ``-8``, or ``±0`` for no change."""
    if delta == 0:
        return "±0"
    return f"{delta:+d}"


def format_kda(participant: ParticipantSummary) -> str:
    if participant.deaths == 0:
        return "Perfect"
    return f"{participant.kda:.2f}"


def queue_name(queue_id: int | None) -> str:
    if queue_id is None:
        return "Unknown queue"
    return QUEUE_NAMES.get(queue_id, f"Queue {queue_id}")


def format_game_line(participant: ParticipantSummary, match: MatchRecord | None = None) -> str:
    """One line per game.

    League: ``✅ - Ahri 10/2/8 **9.00** KDA``. TFT: placement medal and queue.
    """
    if participant.placement is not None:
        placement = PLACEMENT_MEDALS.get(participant.placement, f"#{participant.placement}")
        queue = queue_name(match.queue_id) if match is not None else ""
        return f"{placement}\t[{queue}]" if queue else placement

    if participant.remake:
        marker = REMAKE
    elif participant.won:
        marker = WIN
    else:
        marker = LOSS
    champion = participant.champion_name or "Unknown"
    return (
        f"{marker} - {champion} "
        f"{participant.kills}/{participant.deaths}/{participant.assists} "
        f"**{format_kda(participant)}** KDA"
    )


def _format_winrate_line(wins: int, losses: int, winrate: float | None) -> str:
    if winrate is None:
        return "No games played"
    return f"{wins}/{losses} **{winrate:.2f}%** winrate"


def _banner(game_kind: GameKind) -> str:
    return f"** --- {game_kind.display_name} --- **"


def render_recap(report: RecapReport) -> str:
    """Render a daily recap as a Discord message."""
    live = report.live_rank.format() if report.live_rank is not None else "Unranked"
    lines = [
        _banner(report.game_kind),
        "",
        f"**{report.riot_id}** {live}",
        "",
        f"Recap for **{report.day.strftime('%A, %B %d, %Y')}**",
        "",
        _format_winrate_line(report.wins, report.losses, report.winrate),
    ]

    summary = report.rank_summary
    if isinstance(summary, NoSnapshots):
        lines += ["", "*Rank not tracked yet, use /track to start recording LP*"]
    else:
        title = "LP DAILY RECAP" if summary.window_closed else (
            f"LP RECAP as of {report.generated_at.strftime('%H:%M:%S %Z').strip()}"
        )
        lines += [
            "",
            f"`{title}`",
            "",
            f"start\t{summary.start_rank.format()}",
            f"end\t  {summary.end_rank.format()}",
            f"Gain **{format_delta(summary.delta)}**",
        ]

    if report.wins > report.losses:
        lines += ["", f"**{TRENDING_UP}**"]
    elif report.wins < report.losses:
        lines += ["", f"**{TRENDING_DOWN}**"]

    if report.failed_matches:
        lines += ["", f"*{report.failed_matches} game(s) could not be loaded*"]

    if report.game_kind is GameKind.TFT:
        lines += ["", "*Recap includes normal games in TFT because of API limitations*"]

    return "\n".join(lines)


def _season_line(report: WinrateReport) -> str:
    entry = report.entry
    if entry is None or entry.tier is None:
        return "Unranked"

    try:
        rank = Rank.parse(entry.tier, entry.rank, entry.league_points).format()
    except ValueError:
        rank = f"{entry.tier} {entry.rank or ''} - {entry.league_points} LP"

    line = f"[**{rank}**] {entry.wins}/{entry.losses}"
    if report.season_winrate is not None:
        line += f" ({report.season_winrate:.2f}%)"
    if entry.hot_streak:
        line += f" {HOT_STREAK}"
    return line


def render_winrate(report: WinrateReport) -> str:
    """Render a win-rate report as a Discord message."""
    lines = [
        _banner(report.game_kind),
        "",
        f"**{report.riot_id}** {_season_line(report)}",
        "",
    ]

    if report.winrate is None:
        lines.append("No recent games")
    else:
        played = report.wins + report.losses
        lines.append(f"**{report.winrate:.2f}%** in last {played} game(s)")

    lines += [format_game_line(game.participant, game.match) for game in report.games]

    if report.failed_matches:
        lines += ["", f"*{report.failed_matches} game(s) could not be loaded*"]

    return "\n".join(lines)


def render_tracked(entries: list[TrackingEntry], game_kind: GameKind) -> str:
    """Render the list of tracked players for one game kind."""
    if not entries:
        return f"No players tracked for {game_kind.display_name}"
    lines = [f"**Tracked players ({game_kind.display_name})**", ""]
    lines += [f"- {entry.riot_id}" for entry in entries]
    return "\n".join(lines)

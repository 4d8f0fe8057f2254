"""Team selection after sign-in."""

import logging
from collections.abc import Sequence

from nscm.exceptions import InvalidTeamSelectionError, NoTeamsAvailableError
from nscm.interaction import Prompter
from nscm.models import Team

logger = logging.getLogger(__name__)

TEAM_PROMPT_HEADER = (
    "Enter the number of the team you would like to use for this session."
)


def format_team_prompt(teams: Sequence[Team]) -> str:
    lines = [TEAM_PROMPT_HEADER]
    for i, team in enumerate(teams):
        lines.append(f"{i + 1}: {team.name} ({team.role})")
    lines.append("")
    return "\n".join(lines) + "\n"


def resolve_team(teams: Sequence[Team], prompter: Prompter) -> Team:
    """Select exactly one team.

    A single team is used without asking. With several, the operator picks one
    by its 1-based number; there is no re-prompt on a bad answer.

    Raises:
        NoTeamsAvailableError: If ``teams`` is empty.
        InvalidTeamSelectionError: If the answer is not a listed number.
    """
    if not teams:
        raise NoTeamsAvailableError()

    if len(teams) == 1:
        logger.debug("Single team %s, selecting without prompt", teams[0].id)
        return teams[0]

    answer = prompter.ask(format_team_prompt(teams))
    try:
        choice = int(answer.strip())
    except ValueError:
        raise InvalidTeamSelectionError(answer)

    if choice < 1 or choice > len(teams):
        raise InvalidTeamSelectionError(answer)

    return teams[choice - 1]

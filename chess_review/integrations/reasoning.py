"""Game analysis through the reasoning service.

Builds the review prompt, pulls the JSON object out of the free-form reply
and splits it into the stored analysis and the puzzle candidates.
"""

import json
import re
from dataclasses import dataclass
from string import Template
from typing import Any, Dict, List, Optional, Tuple, Union

import structlog
from pydantic import ValidationError

from chess_review.errors import ResponseParseError
from chess_review.integrations.claude import TextGenerator
from chess_review.schemas import AnalysisPayload, GameMetadata

logger = structlog.get_logger()


ANALYSIS_PROMPT = """You are an expert chess analyst and personal coach. Analyze the following chess game from the perspective of {player_name} (playing as {player_side}).

## Game Information
- White: {white}
- Black: {black}
- Result: {result}
- Event: {event}
- Date: {date}
- **Player being analyzed**: {player_name} ({player_side}) - {player_outcome}

## PGN
{pgn}

## Instructions
Review this game for {player_name} ({player_side}). Focus on their moves, their decisions and where they can improve.

Respond with a JSON object in exactly this format:

{{
  "summary": "2-3 sentences on how {player_name} played: opening choice, key themes and the outcome from their side",
  "phases": [
    {{
      "name": "Opening",
      "moves": "1-15",
      "evaluation": "Assessment of {player_name}'s play in this phase",
      "key_ideas": ["What {player_name} did well or poorly"]
    }}
  ],
  "key_moments": [
    {{
      "move_number": 15,
      "move": "Nxe5",
      "fen": "FEN of the position after the move",
      "evaluation": "+1.5",
      "comment": "Why {player_name}'s decision mattered",
      "is_mistake": false
    }}
  ],
  "recommendations": ["A specific improvement for {player_name}"],
  "puzzles": [
    {{
      "title": "Title tied to a key moment or theme of this game",
      "description": "What the puzzle teaches about {player_name}'s play",
      "fen": "FEN of the puzzle position",
      "solution": "Best move or line, e.g. 'Nxe5' or '1. Nxe5 dxe5 2. Qh5+'",
      "hint": "Optional hint",
      "difficulty": "easy|medium|hard",
      "theme": "Tactical theme, e.g. 'Fork', 'Pin', 'Back Rank Mate', 'Endgame Technique'"
    }}
  ]
}}

Requirements:
- Include 3 phases: Opening, Middlegame, Endgame (fewer only if the game ended early)
- Identify 3-5 key moments focused on {player_name}'s moves, with move numbers
- Give 3-5 actionable recommendations addressed directly to {player_name}
- Generate exactly 2 puzzles from positions or themes of this game that target the mistakes found
- Every puzzle needs a valid FEN and a clear solution; match difficulty to the position

Respond with ONLY the JSON object, no other text."""


def safe_template_substitute(template: str, **kwargs) -> str:
    """Substitute {name} placeholders without tripping over braces in values.

    Uses string.Template which handles $variable syntax; {{ and }} in the
    template stay literal braces.
    """
    converted = template.replace("{{", "__DOUBLE_OPEN__").replace("}}", "__DOUBLE_CLOSE__")
    converted = converted.replace("$", "$$")
    converted = re.sub(r"\{(\w+)\}", r"${\1}", converted)
    converted = converted.replace("__DOUBLE_OPEN__", "{").replace("__DOUBLE_CLOSE__", "}")
    return Template(converted).safe_substitute(**kwargs)


def player_outcome(result: str, player_color: Optional[str]) -> str:
    """Describe the result from the analysed player's side."""
    if result == "1/2-1/2":
        return "drew"
    if result == "1-0":
        return "won" if player_color == "white" else "lost"
    if result == "0-1":
        return "won" if player_color == "black" else "lost"
    return "result unknown"


def build_analysis_prompt(
    pgn: str,
    metadata: GameMetadata,
    player_name: str,
    player_color: Optional[str],
) -> str:
    """Build the review prompt. Identical inputs give an identical prompt."""
    return safe_template_substitute(
        ANALYSIS_PROMPT,
        pgn=pgn.strip(),
        white=metadata.white,
        black=metadata.black,
        result=metadata.result,
        event=metadata.event or "Unknown",
        date=metadata.date or "Unknown",
        player_name=player_name,
        player_side="Black" if player_color == "black" else "White",
        player_outcome=player_outcome(metadata.result, player_color),
    )


@dataclass(frozen=True)
class JsonPayload:
    """A JSON object found in the response."""

    data: Dict[str, Any]


@dataclass(frozen=True)
class ParseFailure:
    """No usable JSON object; ``reason`` says why."""

    reason: str


ParseResult = Union[JsonPayload, ParseFailure]


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index just past the object opening at ``start``, or None if it never closes."""
    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1

    return None


def extract_json_object(text: str) -> ParseResult:
    """Parse the first balanced {...} span of a free-form response.

    Commentary before or after the object is ignored. Malformed JSON is not
    repaired.
    """
    start = text.find("{")
    if start == -1:
        return ParseFailure("no JSON object found in response")

    end = _balanced_end(text, start)
    if end is None:
        return ParseFailure("unterminated JSON object in response")

    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError as e:
        return ParseFailure(f"invalid JSON: {e.msg} at position {e.pos}")

    return JsonPayload(data)


class ReasoningClient:
    """Runs one game through the reasoning service and validates the answer."""

    def __init__(self, generator: TextGenerator):
        self.generator = generator

    async def analyze(
        self,
        pgn: str,
        metadata: GameMetadata,
        player_name: str,
        player_color: Optional[str],
    ) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
        """Analyze a game.

        Args:
            pgn: Move text of the game
            metadata: Game headers
            player_name: Player the review is written for
            player_color: Side that player had (white/black)

        Returns:
            (partial_result, puzzle_candidates): the analysis without puzzles,
            and the raw puzzle objects

        Raises:
            ExternalServiceError: If the service call fails
            ResponseParseError: If the reply has no valid analysis object
        """
        prompt = build_analysis_prompt(pgn, metadata, player_name, player_color)

        logger.info(
            "Starting game analysis",
            player_name=player_name,
            player_color=player_color,
            prompt_length=len(prompt),
        )

        raw_response = await self.generator.generate(prompt)

        parsed = extract_json_object(raw_response)
        if isinstance(parsed, ParseFailure):
            logger.warning("Failed to parse analysis response", reason=parsed.reason)
            raise ResponseParseError(
                f"Failed to parse analysis response: {parsed.reason}",
                details={"response_excerpt": raw_response[:500]},
            )

        try:
            payload = AnalysisPayload.model_validate(parsed.data)
        except ValidationError as e:
            logger.warning(
                "Analysis response failed validation",
                error_count=e.error_count(),
            )
            raise ResponseParseError(
                f"Failed to parse analysis response: {e.error_count()} validation error(s)",
                details={"errors": e.errors(include_url=False, include_input=False)},
            ) from e

        puzzles = payload.puzzles or []
        if puzzles:
            logger.info(
                "Puzzles received",
                count=len(puzzles),
                titles=[p.get("title") for p in puzzles],
            )
        else:
            logger.warning("Analysis response did not include puzzles")

        logger.info(
            "Game analysis complete",
            phases_count=len(payload.phases),
            key_moments_count=len(payload.key_moments),
            recommendations_count=len(payload.recommendations),
        )

        return payload.without_puzzles(), puzzles

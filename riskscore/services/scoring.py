"""Response scoring service.

Wraps the pure engine with the response lifecycle:
- a response is scored exactly once, when it is completed
- re-scoring is an explicit, audited action that requires a reason
- every scored response records the snapshot hash that produced it
"""

import logging

from riskscore.core.config import settings
from riskscore.core.logging import audit_logger, scoring_context
from riskscore.schemas.questionnaire import Questionnaire, Response, ResponseStatus
from riskscore.schemas.scoring_config import ScoringConfig
from riskscore.scoring.engine import ScoringResult, evaluate
from riskscore.utils.time import utc_now

logger = logging.getLogger(__name__)


class ResponseScoringError(Exception):
    """Base exception for response scoring lifecycle errors."""

    pass


class ResponseAlreadyScoredError(ResponseScoringError):
    """Raised when scoring a response that already carries a score."""

    pass


class RescoreReasonRequiredError(ResponseScoringError):
    """Raised when re-scoring is attempted without a reason."""

    pass


class SnapshotMismatchError(ResponseScoringError):
    """Raised when the response, questionnaire and config do not belong together."""

    pass


class ScoringService:
    """Service for scoring questionnaire responses.

    Handles:
    - Scoring a response on completion
    - Explicit re-scoring (with required reason)
    - Audit trail for both
    """

    def __init__(
        self,
        actor_type: str = "system",
        actor_id: str = "scoring-engine",
        validate_config: bool | None = None,
    ) -> None:
        self.actor_type = actor_type
        self.actor_id = actor_id
        if validate_config is None:
            validate_config = settings.validate_config_on_evaluate
        self.validate_config = validate_config

    def _check_snapshots(
        self,
        response: Response,
        questionnaire: Questionnaire,
        config: ScoringConfig,
    ) -> None:
        if response.questionnaire_id != questionnaire.id:
            raise SnapshotMismatchError(
                f"Response {response.id} belongs to questionnaire "
                f"'{response.questionnaire_id}', not '{questionnaire.id}'"
            )
        if config.questionnaire_id != questionnaire.id:
            raise SnapshotMismatchError(
                f"Scoring config '{config.id}' belongs to questionnaire "
                f"'{config.questionnaire_id}', not '{questionnaire.id}'"
            )

    def _apply(self, response: Response, result: ScoringResult) -> Response:
        return response.model_copy(
            update={
                "status": ResponseStatus.COMPLETED,
                **result.to_response_fields(),
                "flag_reasons": list(result.flag_reasons),
                "scored_at": utc_now(),
                "snapshot_hash": result.snapshot_hash,
            }
        )

    def evaluate_response(
        self,
        response: Response,
        questionnaire: Questionnaire,
        config: ScoringConfig,
        allow_incomplete: bool = False,
    ) -> ScoringResult:
        """Run the engine for a response without touching its lifecycle.

        Raises:
            SnapshotMismatchError: If the snapshots don't belong together
            ScoringError: If the submission or configuration is invalid
        """
        self._check_snapshots(response, questionnaire, config)
        return evaluate(
            questionnaire,
            response.answers,
            config,
            allow_incomplete=allow_incomplete,
            validate_config=self.validate_config,
        )

    def score_response(
        self,
        response: Response,
        questionnaire: Questionnaire,
        config: ScoringConfig,
        allow_incomplete: bool = False,
    ) -> tuple[Response, ScoringResult]:
        """Score a response exactly once.

        Args:
            response: Response being completed
            questionnaire: Questionnaire snapshot the response was given against
            config: Scoring configuration snapshot
            allow_incomplete: Score even if required answers are missing

        Returns:
            Tuple of (completed response copy, scoring result)

        Raises:
            ResponseAlreadyScoredError: If the response was already scored
            SnapshotMismatchError: If the snapshots don't belong together
            ScoringError: If the submission or configuration is invalid
        """
        if response.is_scored:
            raise ResponseAlreadyScoredError(
                f"Response {response.id} was already scored at {response.scored_at}. "
                "Use rescore_response with a reason."
            )

        result = self.evaluate_response(response, questionnaire, config, allow_incomplete)
        scored = self._apply(response, result)
        context = scoring_context(
            response_id=response.id,
            questionnaire_id=questionnaire.id,
            config_id=config.id,
            config_version=config.version,
            snapshot_hash=result.snapshot_hash,
        )

        logger.info(
            f"Scored response {response.id}: score={result.score} "
            f"risk_level={result.risk_level} flagged={result.flagged}",
            extra=context,
        )
        if result.flagged:
            logger.warning(
                f"Response {response.id} flagged for review: {', '.join(result.flag_reasons)}",
                extra=context,
            )

        audit_logger.log(
            action="response_scored",
            actor_type=self.actor_type,
            actor_id=self.actor_id,
            entity_type="questionnaire_response",
            entity_id=response.id,
            metadata={
                "questionnaire_id": questionnaire.id,
                "config_id": config.id,
                "config_version": config.version,
                "score": result.score,
                "risk_level": result.risk_level,
                "flagged": result.flagged,
                "flag_reasons": result.flag_reasons,
                "snapshot_hash": result.snapshot_hash,
            },
            context=context,
        )

        return scored, result

    def rescore_response(
        self,
        response: Response,
        questionnaire: Questionnaire,
        config: ScoringConfig,
        reason: str,
        actor_id: str,
        allow_incomplete: bool = False,
    ) -> tuple[Response, ScoringResult]:
        """Explicitly re-score a response, e.g. after a config correction.

        Args:
            response: Previously scored (or unscored) response
            questionnaire: Questionnaire snapshot
            config: Scoring configuration snapshot to score against
            reason: Why the response is being re-scored (required)
            actor_id: Who requested the re-score
            allow_incomplete: Score even if required answers are missing

        Returns:
            Tuple of (re-scored response copy, scoring result)

        Raises:
            RescoreReasonRequiredError: If reason is empty
            SnapshotMismatchError: If the snapshots don't belong together
            ScoringError: If the submission or configuration is invalid
        """
        if not reason or not reason.strip():
            raise RescoreReasonRequiredError("Re-scoring requires a reason")

        result = self.evaluate_response(response, questionnaire, config, allow_incomplete)
        rescored = self._apply(response, result)
        context = scoring_context(
            response_id=response.id,
            questionnaire_id=questionnaire.id,
            config_id=config.id,
            config_version=config.version,
            snapshot_hash=result.snapshot_hash,
        )

        changed = (
            response.score != result.score
            or response.risk_level != result.risk_level
            or response.flagged_for_review != result.flagged
        )
        logger.info(
            f"Re-scored response {response.id}: {response.score} -> {result.score} "
            f"({response.risk_level} -> {result.risk_level})",
            extra=context,
        )

        audit_logger.log(
            action="response_rescored",
            actor_type="user",
            actor_id=actor_id,
            entity_type="questionnaire_response",
            entity_id=response.id,
            metadata={
                "reason": reason.strip(),
                "config_id": config.id,
                "config_version": config.version,
                "changed": changed,
                "previous": {
                    "score": response.score,
                    "risk_level": response.risk_level,
                    "flagged": response.flagged_for_review,
                    "snapshot_hash": response.snapshot_hash,
                },
                "new": {
                    "score": result.score,
                    "risk_level": result.risk_level,
                    "flagged": result.flagged,
                    "snapshot_hash": result.snapshot_hash,
                },
            },
            context=context,
        )

        return rescored, result

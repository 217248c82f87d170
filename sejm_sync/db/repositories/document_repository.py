"""
Repositories for flat document entities: interpellations, written
questions and replies, legislative drafts, enacted acts, disclosures.
"""

from ..models import (
    EnactedActModel,
    FinancialDisclosureModel,
    InterpellationModel,
    LegislativeDraftModel,
    WrittenQuestionModel,
    WrittenQuestionReplyModel,
)
from .base import UpsertRepository


class InterpellationRepository(UpsertRepository[InterpellationModel]):
    model = InterpellationModel


class WrittenQuestionRepository(UpsertRepository[WrittenQuestionModel]):
    model = WrittenQuestionModel


class WrittenQuestionReplyRepository(UpsertRepository[WrittenQuestionReplyModel]):
    model = WrittenQuestionReplyModel


class LegislativeDraftRepository(UpsertRepository[LegislativeDraftModel]):
    model = LegislativeDraftModel


class EnactedActRepository(UpsertRepository[EnactedActModel]):
    model = EnactedActModel


class FinancialDisclosureRepository(UpsertRepository[FinancialDisclosureModel]):
    model = FinancialDisclosureModel

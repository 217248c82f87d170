"""
Document normalizers: interpellations, written questions (+ replies),
legislative drafts, enacted acts and financial disclosures.

Question fallbacks:
    author      from[0]
    receipt     receiptDate | sentDate
    status      "answered" when any reply exists, else "pending"
Draft fallbacks:
    date        documentDate | deliveryDate
Act fallbacks:
    position    pos | position
    in force    entryIntoForce | entry_into_force
Disclosure fallbacks:
    year        year | rok | rokOswiadczenia
    submitted   submitted | dataZlozenia | data_zlozenia
"""

from typing import Any, Dict, List, Optional

from ..models.documents import (
    EnactedAct,
    FinancialDisclosure,
    Interpellation,
    LegislativeDraft,
    WrittenQuestion,
    WrittenQuestionReply,
)
from .base import NormalizeContext, make_key
from .fields import as_bool, as_int, as_str, as_str_list, date_part, pick


def _question_fields(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[Dict[str, Any]]:
    num = as_int(pick(raw, "num", "number"))
    if num is None:
        return None
    term = as_int(raw.get("term"), ctx.term)
    authors = as_str_list(raw.get("from"))
    replies = raw.get("replies") or []

    return {
        "term": term,
        "num": num,
        "title": as_str(pick(raw, "title", "tytul")),
        "author_id": authors[0] if authors else None,
        "author_ids": authors,
        "recipients": as_str_list(pick(raw, "to", "recipientDetails")),
        "receipt_date": date_part(pick(raw, "receiptDate", "sentDate")),
        "sent_date": date_part(raw.get("sentDate")),
        "last_modified": as_str(raw.get("lastModified")),
        "status": "answered" if replies else "pending",
        "reply_count": len(replies),
    }


def normalize_interpellation(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[Interpellation]:
    fields = _question_fields(raw, ctx)
    if fields is None:
        return None
    return Interpellation(interpellation_id=make_key(fields["term"], fields["num"]), **fields)


def normalize_written_question(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[WrittenQuestion]:
    fields = _question_fields(raw, ctx)
    if fields is None:
        return None
    return WrittenQuestion(question_id=make_key(fields["term"], fields["num"]), **fields)


def normalize_written_question_replies(
    raw: Dict[str, Any],
    ctx: NormalizeContext,
) -> List[WrittenQuestionReply]:
    """Replies embedded in one written question; key falls back to position."""
    num = as_int(pick(raw, "num", "number"))
    if num is None:
        return []
    question_id = make_key(as_int(raw.get("term"), ctx.term), num)

    replies = []
    for position, reply in enumerate(raw.get("replies") or []):
        if not isinstance(reply, dict):
            continue
        key = as_str(reply.get("key")) or str(position)
        replies.append(WrittenQuestionReply(
            reply_id=make_key(question_id, key),
            question_id=question_id,
            key=key,
            author=as_str(reply.get("from")),
            receipt_date=date_part(reply.get("receiptDate")),
            last_modified=as_str(reply.get("lastModified")),
            only_attachment=as_bool(reply.get("onlyAttachment")),
            prolongation=as_bool(reply.get("prolongation")),
        ))
    return replies


def normalize_legislative_draft(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[LegislativeDraft]:
    number = as_str(pick(raw, "number", "nr"))
    if number is None:
        return None
    term = as_int(raw.get("term"), ctx.term)

    return LegislativeDraft(
        draft_id=make_key(term, number),
        term=term,
        number=number,
        title=as_str(pick(raw, "title", "tytul")),
        document_date=date_part(pick(raw, "documentDate", "deliveryDate")),
        delivery_date=date_part(raw.get("deliveryDate")),
        change_date=as_str(raw.get("changeDate")),
        process_prints=as_str_list(raw.get("processPrint")),
    )


def normalize_enacted_act(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[EnactedAct]:
    publisher = as_str(raw.get("publisher")) or "DU"
    year = as_int(raw.get("year"))
    position = as_int(pick(raw, "pos", "position"))
    if year is None or position is None:
        return None

    return EnactedAct(
        act_id=make_key(publisher, year, position),
        publisher=publisher,
        year=year,
        position=position,
        eli=as_str(raw.get("ELI")),
        title=as_str(raw.get("title")),
        type=as_str(raw.get("type")),
        status=as_str(raw.get("status")),
        promulgation=date_part(raw.get("promulgation")),
        announcement_date=date_part(raw.get("announcementDate")),
        entry_into_force=date_part(pick(raw, "entryIntoForce", "entry_into_force")),
    )


DISCLOSURE_FIELDS = {
    "personId", "index", "year", "rok", "rokOswiadczenia",
    "submitted", "dataZlozenia", "data_zlozenia", "type", "url",
}


def normalize_financial_disclosure(raw: Dict[str, Any], ctx: NormalizeContext) -> Optional[FinancialDisclosure]:
    person_id = as_str(pick(raw, "personId", "id_osoby"))
    index = as_int(raw.get("index"))
    if person_id is None or index is None:
        return None
    year = as_int(pick(raw, "year", "rok", "rokOswiadczenia"))

    return FinancialDisclosure(
        disclosure_id=make_key(person_id, year if year is not None else "na", index),
        person_id=person_id,
        year=year,
        index=index,
        submitted_on=date_part(pick(raw, "submitted", "dataZlozenia", "data_zlozenia")),
        kind=as_str(raw.get("type")),
        document_url=as_str(raw.get("url")),
        payload={k: v for k, v in raw.items() if k not in DISCLOSURE_FIELDS},
    )

from __future__ import annotations

import json

import pytest

from sb2backup.core.errors import EncodeError
from sb2backup.services.assembler import BackupDocument
from sb2backup.services.raw_json import RawJSON
from sb2backup.services.serializer import render_backup


def test_minimal_document_bytes() -> None:
    assert render_backup(BackupDocument()) == (
        b'{"db_version":20,"app_version_info":"","commands":[]}\n'
    )


def test_field_order_and_omission() -> None:
    document = BackupDocument(
        cypher="c",
        a_token="a",
        last_change_commands_size=3,
        commands=[RawJSON("1"), RawJSON('"s"')],
    )

    assert render_backup(document) == (
        b'{"db_version":20,"a_token":"a","cypher":"c","last_change_commands_size":3,'
        b'"app_version_info":"","commands":[1,"s"]}\n'
    )


def test_commands_are_embedded_not_quoted() -> None:
    raw = '{ "type": "add",  "amount": 5 }'
    payload = render_backup(BackupDocument(commands=[RawJSON(raw)]))

    assert raw.encode() in payload
    assert json.loads(payload)["commands"] == [{"type": "add", "amount": 5}]


def test_strings_are_escaped_and_kept_as_utf8() -> None:
    payload = render_backup(BackupDocument(selected_sheet='Дом "main"'))

    assert '"selected_sheet":"Дом \\"main\\""'.encode() in payload


def test_unencodable_text_raises_encode_error() -> None:
    with pytest.raises(EncodeError):
        render_backup(BackupDocument.model_construct(commands=[RawJSON('"\ud800"')]))

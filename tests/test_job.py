"""Tests for oracle job building and encoding."""

import base64

import pytest

from aptosfeed.errors import JobEncodingError
from aptosfeed.job import (
    build_job,
    build_price_job,
    decode_delimited,
    describe_job,
    deserialize_job,
    encode_delimited,
    http_task,
    json_parse_task,
    serialize_job,
)

URL = "https://data-server-aptos.onrender.com/odds/1268085"


def test_round_trip_keeps_url_and_path():
    job = deserialize_job(serialize_job(build_price_job(URL, "$.home")))
    assert describe_job(job) == [http_task(URL), json_parse_task("$.home")]


def test_task_order_is_preserved():
    tasks = [json_parse_task("$.a"), http_task(URL), json_parse_task("$.b")]
    assert describe_job(build_job(tasks)) == tasks


def test_delimited_framing():
    job = build_price_job(URL, "$.price")
    body = job.SerializeToString()
    framed = encode_delimited(job)
    assert framed[0] == len(body)
    assert framed[1:] == body


def test_wire_bytes_match_switchboard_field_numbers():
    job = build_job([http_task("u")])
    # tasks=1 (len-delimited) -> Task.http_task=1 -> HttpTask.url=1 "u"
    assert job.SerializeToString() == b"\x0a\x05\x0a\x03\x0a\x01u"


def test_serialized_job_is_base64():
    text = serialize_job(build_price_job(URL, "$.home"))
    assert decode_delimited(base64.b64decode(text)) == build_price_job(URL, "$.home")


def test_empty_task_list():
    with pytest.raises(JobEncodingError):
        build_job([])


def test_unknown_task_type():
    with pytest.raises(JobEncodingError):
        build_job([{"websocket_task": {"url": URL}}])


def test_truncated_payload():
    framed = encode_delimited(build_price_job(URL, "$.home"))
    with pytest.raises(JobEncodingError):
        decode_delimited(framed[:-3])


def test_empty_payload():
    with pytest.raises(JobEncodingError):
        decode_delimited(b"")


def test_invalid_base64():
    with pytest.raises(JobEncodingError):
        deserialize_job("not base64!!")

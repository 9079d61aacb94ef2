"""Get Rows By Key Prefix — scans, row ceiling and cursor lifecycle.

Invariants:
    - Rows returned in cursor order as a JSON array (possibly empty)
    - Ceiling exceeded → 500 naming the ceiling, no partial rows in the body
    - The (ceiling + 1)-th row is fetched before the scan is rejected
    - Every cursor is released exactly once: success, limit, mid-stream error, deadline
"""

import pytest

from sidecar.core.errors import ReaderError

ROWS = [
    {"id": 1, "name": "Alice"},
    {"id": 2, "name": "Bob"},
    {"id": 3, "name": "Carol"},
]


def _seed(reader, rows=ROWS):
    for row in rows:
        reader.add_row("fam", "tbl", ("team-a", row["id"]), row)


async def _scan(client, key=None):
    return await client.post(
        "/get-rows-by-key-prefix/fam/tbl",
        json={"Key": key if key is not None else [{"Value": "team-a"}]},
    )


async def test_returns_rows_in_cursor_order(client, reader):
    _seed(reader)

    res = await _scan(client)

    assert res.status_code == 200
    assert res.json() == ROWS
    assert reader.cursors[0].release_count == 1


async def test_empty_scan_returns_empty_array(client, reader):
    res = await _scan(client, key=[{"Value": "nobody"}])

    assert res.status_code == 200
    assert res.json() == []
    assert reader.cursors[0].release_count == 1


async def test_prefix_filters_rows(client, reader):
    _seed(reader)
    reader.add_row("fam", "tbl", ("team-b", 9), {"id": 9, "name": "Zed"})

    res = await _scan(client, key=[{"Value": "team-b"}])

    assert res.json() == [{"id": 9, "name": "Zed"}]
    assert reader.calls == [("get_rows_by_key_prefix", "fam", "tbl", ("team-b",))]


async def test_malformed_json_returns_500_without_reader_call(client, reader):
    res = await client.post("/get-rows-by-key-prefix/fam/tbl", content=b"[")

    assert res.status_code == 500
    assert reader.calls == []


@pytest.mark.parametrize("max_rows", [2])
async def test_ceiling_exceeded_returns_500_without_partial_rows(client, reader):
    _seed(reader)

    res = await _scan(client)

    assert res.status_code == 500
    assert "max row count (2) exceeded" in res.text
    for row in ROWS:
        assert row["name"] not in res.text
    assert reader.cursors[0].release_count == 1


@pytest.mark.parametrize("max_rows", [2])
async def test_ceiling_rejection_reads_one_row_past_the_limit(client, reader):
    _seed(reader, ROWS * 2)

    await _scan(client)

    assert reader.cursors[0].fetched == 3


@pytest.mark.parametrize("max_rows", [2])
async def test_rows_at_ceiling_are_returned(client, reader):
    _seed(reader, ROWS[:2])

    res = await _scan(client)

    assert res.status_code == 200
    assert res.json() == ROWS[:2]


async def test_zero_ceiling_is_unbounded(client, reader):
    many = [{"id": i, "name": f"n{i}"} for i in range(50)]
    _seed(reader, many)

    res = await _scan(client)

    assert len(res.json()) == 50


async def test_mid_stream_failure_returns_500_and_releases_cursor(client, reader):
    _seed(reader)
    reader.scan_fail_after = 1

    res = await _scan(client)

    assert res.status_code == 500
    assert "replica connection reset" in res.text
    assert "Alice" not in res.text
    assert reader.cursors[0].release_count == 1


async def test_scan_open_failure_returns_500(client, reader):
    reader.scan_error = ReaderError("table not found: fam___tbl")

    res = await _scan(client)

    assert res.status_code == 500
    assert "table not found: fam___tbl" in res.text
    assert reader.cursors == []


@pytest.mark.parametrize("write_timeout", [0.05])
async def test_deadline_cancels_scan_and_releases_cursor(client, reader):
    _seed(reader)
    reader.delay = 0.02

    res = await _scan(client)

    assert res.status_code == 500
    assert "deadline" in res.text
    assert [c.release_count for c in reader.cursors] == [1]


async def test_scan_latency_observed(client, samples):
    await _scan(client)

    assert [s.op for s in samples] == ["get-rows-by-key-prefix"]
    assert samples[0].duration_s >= 0


async def test_foreign_mid_stream_failure_returns_500_and_releases_cursor(
    client, reader,
):
    _seed(reader)
    reader.scan_fail_after = 1
    reader.scan_fail_with = OSError("disk I/O error")

    res = await _scan(client)

    assert res.status_code == 500
    assert res.text == "disk I/O error\n"
    assert reader.cursors[0].release_count == 1

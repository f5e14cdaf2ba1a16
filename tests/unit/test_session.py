"""Unit tests for tagserver.session — the request/reply loop."""
from __future__ import annotations

import io
import json

import pytest

from conftest import StubAnalyzer, frame
from tagserver.protocol.errors import (
    AnalyzerFailure,
    MalformedRequest,
    TruncatedPayload,
    UnknownCommand,
)
from tagserver.protocol.messages import Program
from tagserver.protocol.sink import OutputSink
from tagserver.session.session import Session, SessionResult, SessionState

ANNOUNCEMENT = '{"Program":{"name":"SCIP Ctags","version":"5.9.0"}}'
COMPLETED = '{"Completed":{"command":"generate-tags"}}'


def echo_records(filename: str, content: bytes) -> list[dict[str, object]]:
    """One record per payload line, tagged with the file name."""
    return [
        {"file": filename, "index": i, "text": line.decode("utf-8")}
        for i, line in enumerate(content.split(b"\n"))
    ]


# ---------------------------------------------------------------------------
# Startup and clean termination
# ---------------------------------------------------------------------------


class TestStartup:
    def test_no_requests_emits_only_announcement(self, run_session) -> None:
        result, lines = run_session(b"")
        assert result == SessionResult(requests_completed=0)
        assert result.exit_code == 0
        assert lines == [ANNOUNCEMENT, "", ""]

    def test_announcement_precedes_everything(self, run_session) -> None:
        analyzer = StubAnalyzer(lambda f, c: [{"n": 1}])
        _, lines = run_session(frame("a.go", b"x"), analyzer)
        assert lines[0] == ANNOUNCEMENT
        assert lines[1] == ""

    def test_announcement_flushed_before_first_read(self) -> None:
        destination = io.BytesIO()

        class Source(io.BytesIO):
            def readline(self, size: int = -1) -> bytes:  # type: ignore[override]
                assert destination.getvalue().startswith(ANNOUNCEMENT.encode())
                return super().readline(size)

        session = Session(
            analyzer=StubAnalyzer(),
            source=Source(b""),
            sink=OutputSink(destination),
            announcement=Program(name="SCIP Ctags", version="5.9.0"),
        )
        assert session.run().ok

    def test_payload_read_in_reading_payload_state(self) -> None:
        states: list[SessionState] = []

        class Source(io.BytesIO):
            def read(self, size: int | None = -1) -> bytes:  # type: ignore[override]
                states.append(session.state)
                return super().read(size)

        analyzer = StubAnalyzer(lambda f, c: states.append(session.state) or [])
        session = Session(
            analyzer=analyzer,
            source=Source(frame("a.go", b"package main")),
            sink=OutputSink(io.BytesIO()),
            announcement=Program(name="n", version="v"),
        )
        assert session.run().requests_completed == 1
        assert states == [SessionState.READING_PAYLOAD, SessionState.ANALYZING]
        assert analyzer.calls == [("a.go", b"package main")]

    def test_state_after_clean_end(self) -> None:
        session = Session(
            analyzer=StubAnalyzer(),
            source=io.BytesIO(b""),
            sink=OutputSink(io.BytesIO()),
            announcement=Program(name="n", version="v"),
        )
        assert session.state is SessionState.AWAITING_REQUEST
        session.run()
        assert session.state is SessionState.CLOSED


# ---------------------------------------------------------------------------
# Single request
# ---------------------------------------------------------------------------


class TestGenerateTags:
    def test_go_scenario_ends_with_one_completed(self, run_session) -> None:
        data = b'{"GenerateTags":{"filename":"a.go","size":12}}\npackage main'
        analyzer = StubAnalyzer(lambda f, c: [{"name": "main", "kind": "package"}])
        result, lines = run_session(data, analyzer)

        assert result.requests_completed == 1
        body = [line for line in lines[2:] if line]
        assert body[-1] == COMPLETED
        assert body.count(COMPLETED) == 1
        assert json.loads(body[0]) == {"name": "main", "kind": "package"}

    def test_analyzer_receives_filename_and_exact_payload(self, run_session) -> None:
        analyzer = StubAnalyzer()
        run_session(frame("pkg/a.go", b"package main"), analyzer)
        assert analyzer.calls == [("pkg/a.go", b"package main")]

    def test_no_records_still_completes(self, run_session) -> None:
        result, lines = run_session(frame("README", b"hello"))
        assert result.requests_completed == 1
        assert [line for line in lines[2:] if line] == [COMPLETED]

    def test_zero_size_payload(self, run_session) -> None:
        analyzer = StubAnalyzer()
        result, _ = run_session(frame("empty.go", b""), analyzer)
        assert result.requests_completed == 1
        assert analyzer.calls == [("empty.go", b"")]

    def test_records_keep_production_order(self, run_session) -> None:
        analyzer = StubAnalyzer(lambda f, c: ({"i": i} for i in range(50)))
        _, lines = run_session(frame("a.go", b"x"), analyzer)
        records = [json.loads(line) for line in lines[2:] if line and line != COMPLETED]
        assert [r["i"] for r in records] == list(range(50))

    def test_string_records_pass_through_verbatim(self, run_session) -> None:
        analyzer = StubAnalyzer(lambda f, c: ['{"_type":"tag","name":"x"}'])
        _, lines = run_session(frame("a.go", b"x"), analyzer)
        assert lines[2] == '{"_type":"tag","name":"x"}'


# ---------------------------------------------------------------------------
# Byte-exact payloads
# ---------------------------------------------------------------------------


class TestByteExactness:
    def test_payload_with_newlines_is_not_split(self, run_session) -> None:
        payload = b"package main\n\nfunc main() {\n}\n"
        analyzer = StubAnalyzer()
        result, _ = run_session(frame("a.go", payload) + frame("b.go", b"package b"), analyzer)
        assert result.requests_completed == 2
        assert analyzer.calls == [("a.go", payload), ("b.go", b"package b")]

    def test_payload_that_looks_like_a_request(self, run_session) -> None:
        inner = frame("inner.go", b"zz")
        analyzer = StubAnalyzer()
        result, _ = run_session(frame("outer.go", inner), analyzer)
        assert result.requests_completed == 1
        assert analyzer.calls == [("outer.go", inner)]

    def test_binary_payload(self, run_session) -> None:
        payload = bytes(range(256)) * 4
        analyzer = StubAnalyzer()
        run_session(frame("blob.bin", payload), analyzer)
        assert analyzer.calls[0][1] == payload


# ---------------------------------------------------------------------------
# Ordering across requests
# ---------------------------------------------------------------------------


class TestOrdering:
    @pytest.mark.parametrize("count", [1, 2, 5, 20])
    def test_each_request_output_precedes_its_completed(self, run_session, count: int) -> None:
        data = b"".join(frame(f"f{i}.go", f"a\nb\n{i}".encode()) for i in range(count))
        result, lines = run_session(data, StubAnalyzer(echo_records), buffer_size=16)
        assert result.requests_completed == count

        current = 0
        seen_for_current = 0
        for line in lines[2:]:
            if not line:
                continue
            if line == COMPLETED:
                assert seen_for_current == 3
                current += 1
                seen_for_current = 0
                continue
            record = json.loads(line)
            assert record["file"] == f"f{current}.go"
            seen_for_current += 1
        assert current == count

    def test_each_request_flushed_before_next_line_is_read(self) -> None:
        destination = io.BytesIO()
        data = frame("a.go", b"1") + frame("b.go", b"2")
        completed_at_read: list[int] = []

        class Source(io.BytesIO):
            def readline(self, size: int = -1) -> bytes:  # type: ignore[override]
                completed_at_read.append(destination.getvalue().count(COMPLETED.encode()))
                return super().readline(size)

        session = Session(
            analyzer=StubAnalyzer(lambda f, c: [{"f": f}]),
            source=Source(data),
            sink=OutputSink(destination),
            announcement=Program(name="n", version="v"),
        )
        assert session.run().requests_completed == 2
        assert completed_at_read == [0, 1, 2]


# ---------------------------------------------------------------------------
# Fatal errors
# ---------------------------------------------------------------------------


class TestFatalErrors:
    def test_truncated_payload(self, run_session) -> None:
        data = b'{"GenerateTags":{"filename":"a.go","size":20}}\npackage main'
        analyzer = StubAnalyzer()
        result, lines = run_session(data, analyzer)

        assert isinstance(result.error, TruncatedPayload)
        assert result.error.expected == 20
        assert result.error.received == 12
        assert result.exit_code == 4
        assert COMPLETED not in lines
        assert analyzer.calls == []

    def test_truncation_after_successful_requests(self, run_session) -> None:
        data = frame("a.go", b"ok") + frame("b.go", b"short", size=99)
        result, lines = run_session(data)
        assert result.requests_completed == 1
        assert isinstance(result.error, TruncatedPayload)
        assert lines.count(COMPLETED) == 1

    def test_malformed_request(self, run_session) -> None:
        result, lines = run_session(b"this is not json\n")
        assert isinstance(result.error, MalformedRequest)
        assert result.exit_code == 2
        assert lines == [ANNOUNCEMENT, "", ""]

    def test_blank_line_is_malformed(self, run_session) -> None:
        result, _ = run_session(b"\n")
        assert isinstance(result.error, MalformedRequest)

    def test_invalid_utf8_line_is_malformed(self, run_session) -> None:
        result, _ = run_session(b"\xff\xfe\n")
        assert isinstance(result.error, MalformedRequest)

    def test_unknown_command(self, run_session) -> None:
        result, lines = run_session(b'{"Shutdown":{}}\n' + frame("a.go", b"x"))
        assert isinstance(result.error, UnknownCommand)
        assert result.exit_code == 3
        assert COMPLETED not in lines

    def test_processing_stops_at_first_error(self, run_session) -> None:
        analyzer = StubAnalyzer()
        data = frame("a.go", b"1") + b"garbage\n" + frame("c.go", b"3")
        result, _ = run_session(data, analyzer)
        assert result.requests_completed == 1
        assert [call[0] for call in analyzer.calls] == ["a.go"]

    def test_analyzer_failure_discards_partial_output(self, run_session) -> None:
        def explode(filename: str, content: bytes):
            yield {"partial": True}
            raise RuntimeError("grammar crashed")

        result, lines = run_session(frame("a.go", b"x"), StubAnalyzer(explode))
        assert isinstance(result.error, AnalyzerFailure)
        assert result.error.filename == "a.go"
        assert "grammar crashed" in result.error.reason
        assert result.exit_code == 5
        assert lines == [ANNOUNCEMENT, "", ""]

    def test_unencodable_record_is_analyzer_failure(self, run_session) -> None:
        result, _ = run_session(frame("a.go", b"x"), StubAnalyzer(lambda f, c: [object()]))
        assert isinstance(result.error, AnalyzerFailure)

    def test_failure_keeps_earlier_requests_output(self, run_session) -> None:
        def fail_on_b(filename: str, content: bytes):
            if filename == "b.go":
                raise ValueError("boom")
            return [{"f": filename}]

        data = frame("a.go", b"1") + frame("b.go", b"2")
        result, lines = run_session(data, StubAnalyzer(fail_on_b))
        assert result.requests_completed == 1
        assert lines[2:4] == ['{"f":"a.go"}', COMPLETED]

    def test_state_after_failure(self) -> None:
        session = Session(
            analyzer=StubAnalyzer(),
            source=io.BytesIO(b"nope\n"),
            sink=OutputSink(io.BytesIO()),
            announcement=Program(name="n", version="v"),
        )
        result = session.run()
        assert not result.ok
        assert session.state is SessionState.FAILED

    def test_size_beyond_unsigned_64_bit_is_malformed(self, run_session) -> None:
        data = b'{"GenerateTags":{"filename":"a.go","size":' + str(2**70).encode() + b"}}\nabc"
        result, lines = run_session(data)
        assert isinstance(result.error, MalformedRequest)
        assert result.exit_code == 2
        assert lines == [ANNOUNCEMENT, "", ""]

    def test_huge_size_on_buffered_stream_is_truncation(self) -> None:
        data = b'{"GenerateTags":{"filename":"a.go","size":' + str(2**62).encode() + b"}}\nabc"
        session = Session(
            analyzer=StubAnalyzer(),
            source=io.BufferedReader(io.BytesIO(data)),
            sink=OutputSink(io.BytesIO()),
            announcement=Program(name="n", version="v"),
        )
        result = session.run()
        assert isinstance(result.error, TruncatedPayload)
        assert result.error.received == 3

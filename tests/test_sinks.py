"""
Tests for console and file sinks.
"""

import io
import threading

from sinklog.errors import SinkWriteError
from sinklog.routing import SinkConfig, SinkKind
from sinklog.sinks import ConsoleSink, FileSink, build_sink


class TestConsoleSink:
    def test_writes_to_stdout(self, capsys):
        sink = ConsoleSink(SinkConfig(SinkKind.CONSOLE))
        sink.write("hello console")
        assert capsys.readouterr().out == "hello console\n"

    def test_injected_stream(self):
        stream = io.StringIO()
        sink = ConsoleSink(SinkConfig(SinkKind.CONSOLE), stream=stream)
        sink.write("to stream")
        assert stream.getvalue() == "to stream\n"


class TestFileSink:
    def test_appends_lines(self, tmp_path):
        path = tmp_path / "app.log"
        path.write_text("existing\n", encoding="utf-8")
        sink = FileSink(SinkConfig(SinkKind.FILE, path=str(path)))
        sink.write("one")
        sink.write("two\n{\n  \"a\": 1\n}")
        sink.close()
        assert path.read_text(encoding="utf-8") == 'existing\none\ntwo\n{\n  "a": 1\n}\n'

    def test_lazy_open_creates_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "errors.log"
        sink = FileSink(SinkConfig(SinkKind.ERROR_FILE, path=str(path)))
        assert not path.exists()
        sink.write("boom")
        sink.close()
        assert path.read_text(encoding="utf-8") == "boom\n"

    def test_utf8(self, tmp_path):
        path = tmp_path / "u.log"
        sink = FileSink(SinkConfig(SinkKind.FILE, path=str(path)))
        sink.write("héllo ✓")
        sink.close()
        assert path.read_text(encoding="utf-8") == "héllo ✓\n"

    def test_size_limit_refuses_and_reports(self, tmp_path):
        path = tmp_path / "small.log"
        errors = []
        sink = FileSink(
            SinkConfig(SinkKind.FILE, path=str(path), size_limit=10),
            on_error=errors.append,
        )
        sink.write("12345")   # 6 bytes
        sink.write("67890")   # would reach 12
        sink.close()
        assert path.read_text(encoding="utf-8") == "12345\n"
        assert len(errors) == 1
        assert isinstance(errors[0], SinkWriteError)
        assert "size limit" in errors[0].reason

    def test_size_limit_counts_existing_content(self, tmp_path):
        path = tmp_path / "full.log"
        path.write_text("x" * 10, encoding="utf-8")
        errors = []
        sink = FileSink(SinkConfig(SinkKind.FILE, path=str(path), size_limit=10), errors.append)
        sink.write("y")
        sink.close()
        assert errors

    def test_size_limit_shared_by_sinks_on_one_path(self, tmp_path):
        path = tmp_path / "shared.log"
        errors = []
        cfg = SinkConfig(SinkKind.FILE, path=str(path), size_limit=10)
        first, second = FileSink(cfg, errors.append), FileSink(cfg, errors.append)
        first.write("ab")     # 3 bytes
        second.write("cd")    # 6
        first.write("efg")    # 10, at the limit
        second.write("h")     # would reach 12
        first.close()
        second.close()
        assert path.read_text(encoding="utf-8") == "ab\ncd\nefg\n"
        assert len(errors) == 1
        assert "size limit" in errors[0].reason

    def test_concurrent_writes_stay_whole(self, tmp_path):
        path = tmp_path / "threads.log"
        sink = FileSink(SinkConfig(SinkKind.FILE, path=str(path)))

        def writer(n):
            for i in range(50):
                sink.write(f"thread-{n} line-{i}")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        sink.close()

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 400
        assert all(line.startswith("thread-") for line in lines)


class TestErrorChannel:
    def test_failure_goes_to_channel(self):
        errors = []

        class Broken(ConsoleSink):
            def emit(self, text):
                raise RuntimeError("sink exploded")

        sink = Broken(SinkConfig(SinkKind.CONSOLE), on_error=errors.append)
        sink.write("x")  # must not raise
        assert len(errors) == 1
        assert "sink exploded" in str(errors[0])

    def test_default_channel_is_stderr(self, capsys):
        class Broken(ConsoleSink):
            def emit(self, text):
                raise OSError("disk gone")

        Broken(SinkConfig(SinkKind.CONSOLE)).write("x")
        assert "[sinklog] console: OSError: disk gone" in capsys.readouterr().err


class TestBuildSink:
    def test_kind_mapping(self, tmp_path):
        assert isinstance(build_sink(SinkConfig(SinkKind.CONSOLE)), ConsoleSink)
        for kind in (SinkKind.FILE, SinkKind.ERROR_FILE, SinkKind.EXCEPTION_FILE):
            sink = build_sink(SinkConfig(kind, path=str(tmp_path / "x.log")))
            assert isinstance(sink, FileSink)

import sys
import os
import io
import logging

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import main


def write_csv(tmp_path, text):
    csv_file = tmp_path / "input.csv"
    csv_file.write_text(text)
    return str(csv_file)


class TestMain:
    def test_success_writes_snapshot(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, "\n".join([
            "type, client, tx, amount",
            "deposit, 2, 1, 2.0",
            "deposit, 1, 2, 1.0",
            "withdrawal, 1, 3, 0.25",
            "dispute, 2, 1,",
        ]))

        assert main.main([csv_file]) == main.EXIT_OK

        out = capsys.readouterr().out
        assert out.splitlines() == [
            "client,available,held,total,locked",
            "1,0.75000,0.00000,0.75000,false",
            "2,0.00000,2.00000,2.00000,false",
        ]

    def test_usage(self, capsys):
        assert main.main([]) == main.EXIT_USAGE
        assert "Usage" in capsys.readouterr().err

        assert main.main(["a.csv", "b.csv"]) == main.EXIT_USAGE

    def test_file_not_found(self, tmp_path, capsys):
        missing = str(tmp_path / "missing.csv")

        assert main.main([missing]) == main.EXIT_NOT_FOUND

        captured = capsys.readouterr()
        assert captured.out == ""
        assert f"input file '{missing}' does not exist" in captured.err

    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores file permissions")
    def test_permission_denied(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, "type,client,tx,amount\n")
        os.chmod(csv_file, 0)

        try:
            assert main.main([csv_file]) == main.EXIT_PERMISSION_DENIED
        finally:
            os.chmod(csv_file, 0o644)

        assert "is not readable" in capsys.readouterr().err

    def test_permission_denied_mapped(self, monkeypatch, capsys):
        def deny(self, filepath):
            raise PermissionError(13, "Permission denied", filepath)

        monkeypatch.setattr(main.PaymentsEngine, "process_file", deny)

        assert main.main(["locked.csv"]) == main.EXIT_PERMISSION_DENIED
        assert "input file 'locked.csv' is not readable" in capsys.readouterr().err

    def test_malformed_input(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, "type,client,tx,amount\ndeposit,1,1,1\ndeposit,x,2,1\n")

        assert main.main([csv_file]) == main.EXIT_MALFORMED_INPUT

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "has an invalid format: line 3" in captured.err

    def test_oversized_amount_is_malformed(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, "type,client,tx,amount\ndeposit,1,1,1" + "0" * 40 + "\n")

        assert main.main([csv_file]) == main.EXIT_MALFORMED_INPUT

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "exceeds 30 integer digits" in captured.err

    def test_large_balances_written_exactly(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, "\n".join([
            "type,client,tx,amount",
            "deposit,1,1,90000000000000000000000",
            "deposit,1,2,90000000000000000000000.00001",
        ]))

        assert main.main([csv_file]) == main.EXIT_OK

        assert capsys.readouterr().out.splitlines()[1] == \
            "1,180000000000000000000000.00001,0.00000,180000000000000000000000.00001,false"

    def test_directory_is_read_failure(self, tmp_path, capsys):
        assert main.main([str(tmp_path)]) in (main.EXIT_READ_FAILED, main.EXIT_PERMISSION_DENIED)
        assert "Error: input file" in capsys.readouterr().err

    def test_output_failure(self, tmp_path, monkeypatch, capsys):
        csv_file = write_csv(tmp_path, "type,client,tx,amount\ndeposit,1,1,1\n")
        closed = io.StringIO()
        closed.close()
        monkeypatch.setattr(sys, "stdout", closed)

        assert main.main([csv_file]) == main.EXIT_OUTPUT_FAILED
        assert "unable to write account snapshot" in capsys.readouterr().err

    def test_log_level_from_environment(self, monkeypatch):
        monkeypatch.delenv("PAYMENTS_LOG_LEVEL", raising=False)
        assert main.get_log_level() == logging.WARNING

        monkeypatch.setenv("PAYMENTS_LOG_LEVEL", "debug")
        assert main.get_log_level() == logging.DEBUG

        monkeypatch.setenv("PAYMENTS_LOG_LEVEL", "not-a-level")
        assert main.get_log_level() == logging.WARNING

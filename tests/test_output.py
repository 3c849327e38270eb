"""
Tests for JSONL and table output.
"""

import json

from newmac.domain import RunSummary, StepResult, StepStatus
from newmac.output import _auto_columns, _format_value, emit, emit_error


class TestEmit:
    def test_jsonl(self, capsys):
        emit([StepResult('cleanup', StepStatus.SUCCESS, 'cleaned'), {'name': 'nvim'}])

        lines = capsys.readouterr().out.splitlines()
        assert json.loads(lines[0]) == {'step': 'cleanup', 'status': 'success', 'action': 'cleaned'}
        assert json.loads(lines[1]) == {'name': 'nvim'}

    def test_summary_record(self, capsys):
        summary = RunSummary(profile='work')
        summary.add_detail(StepResult('cleanup', StepStatus.FAILED, 'failed', error='boom'))

        emit([summary])

        record = json.loads(capsys.readouterr().out)
        assert record['type'] == 'summary'
        assert record['failed'] == 1
        assert record['errors'] == ['cleanup: boom']

    def test_pretty_table(self, capsys):
        emit([StepResult('symlinks', StepStatus.SKIPPED, 'already_present')],
             pretty=True, title='newmac (home)')
        out = capsys.readouterr().out
        assert 'symlinks' in out
        assert 'newmac (home)' in out

    def test_pretty_empty(self, capsys):
        emit([], pretty=True)
        assert 'No results found.' in capsys.readouterr().out

    def test_error_to_stderr(self, capsys):
        emit_error('Failed to clone', type='CloneError', context={'exit_code': 66})

        captured = capsys.readouterr()
        assert captured.out == ''
        assert json.loads(captured.err) == {
            'error': 'Failed to clone', 'type': 'CloneError', 'context': {'exit_code': 66},
        }


class TestFormatting:
    def test_auto_columns_order(self):
        rows = [{'path': '/x', 'step': 'a', 'status': 'success', 'zeta': 1}]
        assert _auto_columns(rows) == ['step', 'status', 'path', 'zeta']

    def test_format_values(self):
        assert _format_value(None) == ''
        assert _format_value(True) == 'Yes'
        assert _format_value(['a', 'b', 'c', 'd']) == 'a, b, c (+1 more)'
        assert _format_value('x' * 100).endswith('...')

    def test_home_paths_shortened(self, monkeypatch, tmp_path):
        monkeypatch.setenv('HOME', str(tmp_path))
        assert _format_value(str(tmp_path / '.ssh' / 'id_ed25519')) == '~/.ssh/id_ed25519'
        assert _format_value('/opt/homebrew') == '/opt/homebrew'

"""Tests for taskn.config.Config defaults and environment fallbacks."""

from __future__ import annotations

import os

from taskn.config import Config, DEFAULT_FILE_FORMAT, PENDING_FILTER


def test_defaults(monkeypatch):
    monkeypatch.delenv("EDITOR", raising=False)
    monkeypatch.delenv("TASKN_ROOT_DIR", raising=False)
    monkeypatch.delenv("TASKN_TASK_BIN", raising=False)

    cfg = Config()
    assert cfg.editor == "vi"
    assert cfg.file_format == DEFAULT_FILE_FORMAT
    assert cfg.root_dir == os.path.expanduser("~/.taskn")
    assert cfg.task_bin == "task"
    assert cfg.args == []


def test_editor_from_env(monkeypatch):
    monkeypatch.setenv("EDITOR", "nano")
    assert Config().editor == "nano"
    assert Config(editor="hx").editor == "hx"


def test_root_dir_env_and_tilde(monkeypatch, tmp_path):
    monkeypatch.setenv("TASKN_ROOT_DIR", str(tmp_path))
    assert Config().notes_dir == tmp_path
    assert Config(root_dir="~/notes").root_dir == os.path.expanduser("~/notes")


def test_task_bin_env(monkeypatch):
    monkeypatch.setenv("TASKN_TASK_BIN", "/opt/tw/task")
    assert Config().task_bin == "/opt/tw/task"


def test_file_format_strips_dot():
    assert Config(file_format=".txt").file_format == "txt"


def test_pending_filter_appends_status():
    cfg = Config(args=["project:home", "+next"])
    assert cfg.pending_filter() == ["project:home", "+next", PENDING_FILTER]


def test_args_not_shared():
    a = Config()
    b = Config()
    a.args.append("x")
    assert b.args == []

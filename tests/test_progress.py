import pytest

from casetranslate.progress import ConsoleProgress, ProgressReporter, RecordingProgress


def test_reporter_without_log_sink_cannot_be_created():
    class Silent(ProgressReporter):
        pass

    with pytest.raises(TypeError):
        Silent()


def test_recording_progress_keeps_messages_and_abort_flag():
    progress = RecordingProgress()
    progress.set_main_progress(1, 3)
    progress.log_message("Completed!")

    assert progress.messages == ["Completed!"]
    assert (progress.main_progress, progress.main_total) == (1, 3)
    assert not progress.abort_requested()
    progress.request_abort()
    assert progress.abort_requested()


def test_console_progress_announces_abort_once(capsys):
    progress = ConsoleProgress()
    progress.request_abort()
    progress.request_abort()

    out = capsys.readouterr().out
    assert out.count("Abort requested; stopping after the current item.") == 1


def test_console_progress_shows_sub_status_only_when_verbose(capsys):
    quiet = ConsoleProgress()
    quiet.set_main_status("Detecting languages")
    quiet.set_sub_status("Item 1/2")
    assert capsys.readouterr().out == ""

    verbose = ConsoleProgress(verbose=True)
    verbose.set_main_status("Detecting languages")
    verbose.set_sub_status("Item 1/2")
    assert capsys.readouterr().out == "Detecting languages: Item 1/2\n"

import json

import pytest

from playground.api.cli import body_from_args, build_parser, main
from playground.image.client import PredictionClient
from playground.image.poller import PredictionPoller
from tests.helpers import FakeResponse, prediction


@pytest.fixture
def poller(session, clock):
    return PredictionPoller(
        PredictionClient("r8_test", session=session), sleep=clock.sleep, clock=clock
    )


def test_body_from_args_keeps_given_flags_only():
    args = build_parser().parse_args(
        ["generate", "a cat", "--model", "seedream", "--size", "custom", "--width", "2048",
         "--image", "https://x/a.png", "--image", "https://x/b.png"]
    )

    assert body_from_args(args) == {
        "model_key": "seedream",
        "prompt": "a cat",
        "size": "custom",
        "width": "2048",
        "image_input": ["https://x/a.png", "https://x/b.png"],
    }


def test_generate_prints_result(settings, poller, session, capsys):
    session.queue(FakeResponse(201, prediction("succeeded", output="https://x/a.jpg")))

    code = main(["generate", "a cat", "--model", "nano-banana"], settings=settings, poller=poller)

    assert code == 0
    result = json.loads(capsys.readouterr().out)
    assert result["image_url"] == "https://x/a.jpg"
    assert session.calls[0]["json"]["input"]["output_format"] == "jpg"


def test_refine_prints_result(settings, poller, session, capsys):
    session.queue(FakeResponse(201, prediction("succeeded", output="A moody cat")))

    code = main(["refine", "a cat"], settings=settings, poller=poller)

    assert code == 0
    assert json.loads(capsys.readouterr().out)["refined_prompt"] == "A moody cat"


def test_errors_go_to_stderr(settings, poller, session, capsys):
    session.queue(FakeResponse(401, {"detail": "Invalid token"}))

    code = main(["generate", "a cat"], settings=settings, poller=poller)

    assert code == 1
    err = capsys.readouterr().err
    assert '"error": "Invalid token"' in err
    assert '"detail": "Invalid token"' in err

"""Tests for the acknowledgement state machine."""

from pathlib import Path
import sys

import pytest
from structlog.testing import capture_logs

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:  # pragma: no cover
    sys.path.insert(0, str(ROOT))

from mini_interaction.acknowledgement import AcknowledgementStateMachine  # noqa: E402
from mini_interaction.capture import ResponseCapture  # noqa: E402
from mini_interaction.constants import (  # noqa: E402
    InteractionResponseType,
    InteractionType,
    MessageFlags,
)
from mini_interaction.errors import (  # noqa: E402
    EmptyPayloadError,
    FollowUpDeliveryError,
    InvalidTransitionError,
)
from mini_interaction.responses import InteractionResponse, Serializable  # noqa: E402


class RecordingChannel:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def send(self, token, payload, message_id=None):
        self.calls.append((token, payload, message_id))
        if self.error is not None:
            raise self.error
        return {"id": f"msg-{len(self.calls)}"}


class ModalStub(Serializable):
    def to_dict(self):
        return {"custom_id": "m1", "title": "T", "components": [{"type": 1, "components": []}]}


def _machine(kind=InteractionType.APPLICATION_COMMAND, channel=None, capture=None):
    return AcknowledgementStateMachine(
        interaction_type=kind,
        token="tok",
        interaction_id="1",
        follow_up_channel=channel,
        capture=capture,
    )


def test_starts_unacknowledged():
    machine = _machine()

    assert machine.acknowledged is False
    assert machine.deferred is False
    assert machine.get_response() is None
    assert machine.initial_response is None


def test_reply_captures_channel_message():
    machine = _machine()

    response = machine.reply({"content": "x"})

    assert response.type is InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE
    assert machine.get_response() == InteractionResponse.channel_message({"content": "x"})
    assert machine.initial_response is response
    assert machine.acknowledged is True
    assert machine.deferred is False


@pytest.mark.parametrize("data", [None, {}, {"flags": 64}])
def test_reply_without_content_raises_before_acknowledging(data):
    machine = _machine()

    with pytest.raises(EmptyPayloadError):
        machine.reply(data)

    assert machine.acknowledged is False
    assert machine.get_response() is None


def test_defer_reply_sets_deferred_flag():
    machine = _machine()

    response = machine.defer_reply()

    assert machine.deferred is True
    assert response.to_dict() == {"type": 5}
    assert machine.get_response().deferred is True


def test_defer_reply_with_ephemeral_flag():
    machine = _machine()

    response = machine.defer_reply(MessageFlags.EPHEMERAL)

    assert response.data == {"flags": 64}


def test_reply_after_defer_edits_original_through_follow_up():
    channel = RecordingChannel()
    machine = _machine(channel=channel)
    deferral = machine.defer_reply()

    final = machine.reply({"content": "done"})

    assert channel.calls == [("tok", {"content": "done"}, "@original")]
    assert machine.initial_response is deferral
    assert machine.get_response() is final
    assert final.data == {"content": "done"}


def test_reply_after_defer_without_channel_fails():
    machine = _machine()
    machine.defer_reply()

    with pytest.raises(FollowUpDeliveryError) as err:
        machine.reply({"content": "done"})

    assert err.value.retryable is False


def test_follow_up_failure_propagates_and_keeps_previous_capture():
    channel = RecordingChannel(error=FollowUpDeliveryError("expired", status_code=404))
    machine = _machine(channel=channel)
    deferral = machine.defer_reply()

    with pytest.raises(FollowUpDeliveryError) as err:
        machine.reply({"content": "done"})

    assert err.value.status_code == 404
    assert machine.get_response() is deferral


def test_second_synchronous_acknowledgement_is_rejected():
    machine = _machine()
    machine.reply({"content": "first"})

    with pytest.raises(InvalidTransitionError):
        machine.reply({"content": "second"})
    with pytest.raises(InvalidTransitionError):
        machine.defer_reply()


def test_second_deferral_is_rejected():
    machine = _machine()
    machine.defer_reply()

    with pytest.raises(InvalidTransitionError):
        machine.defer_reply()


def test_update_only_for_component_interactions():
    machine = _machine(InteractionType.APPLICATION_COMMAND)

    with pytest.raises(InvalidTransitionError):
        machine.update({"content": "x"})
    with pytest.raises(InvalidTransitionError):
        machine.defer_update()

    assert machine.acknowledged is False


def test_update_without_data_still_acknowledges():
    machine = _machine(InteractionType.MESSAGE_COMPONENT)

    response = machine.update()

    assert response.to_dict() == {"type": 7}
    assert machine.acknowledged is True


def test_update_after_defer_update_edits_original():
    channel = RecordingChannel()
    machine = _machine(InteractionType.MESSAGE_COMPONENT, channel=channel)
    machine.defer_update()

    machine.update({"content": "refreshed"})

    assert channel.calls == [("tok", {"content": "refreshed"}, "@original")]
    assert machine.initial_response.type is InteractionResponseType.DEFERRED_UPDATE_MESSAGE


def test_update_after_defer_without_data_sends_nothing():
    channel = RecordingChannel()
    machine = _machine(InteractionType.MESSAGE_COMPONENT, channel=channel)
    machine.defer_update()

    machine.update()

    assert channel.calls == []


def test_show_modal_accepts_serializable_builder():
    machine = _machine()

    response = machine.show_modal(ModalStub())

    assert response.type is InteractionResponseType.MODAL
    assert response.data["custom_id"] == "m1"


def test_show_modal_not_allowed_for_modal_submit():
    machine = _machine(InteractionType.MODAL_SUBMIT)

    with pytest.raises(InvalidTransitionError):
        machine.show_modal({"custom_id": "m1", "title": "T", "components": []})


def test_show_modal_after_acknowledgement_is_rejected():
    machine = _machine(InteractionType.MESSAGE_COMPONENT)
    machine.defer_update()

    with pytest.raises(InvalidTransitionError):
        machine.show_modal(ModalStub())


def test_show_modal_requires_payload():
    machine = _machine()

    with pytest.raises(EmptyPayloadError):
        machine.show_modal({})


def test_edit_reply_defaults_to_empty_content():
    channel = RecordingChannel()
    machine = _machine(InteractionType.MODAL_SUBMIT, channel=channel)
    machine.defer_reply()

    response = machine.edit_reply()

    assert channel.calls == [("tok", {"content": ""}, "@original")]
    assert response.data == {"content": ""}


def test_follow_up_posts_new_message():
    channel = RecordingChannel()
    machine = _machine(channel=channel)
    machine.defer_reply()

    message = machine.follow_up({"content": "extra", "flags": MessageFlags.EPHEMERAL})

    assert message == {"id": "msg-1"}
    assert channel.calls == [("tok", {"content": "extra", "flags": 64}, None)]
    assert machine.get_response().type is InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE


def test_follow_up_requires_content():
    machine = _machine(channel=RecordingChannel())

    with pytest.raises(EmptyPayloadError):
        machine.follow_up({})


def test_acknowledge_with_prebuilt_response_applies_kind_rules():
    machine = _machine(InteractionType.APPLICATION_COMMAND)

    with pytest.raises(InvalidTransitionError):
        machine.acknowledge(InteractionResponse.update_message({"content": "x"}))
    with pytest.raises(EmptyPayloadError):
        machine.acknowledge(InteractionResponse.channel_message({}))

    response = machine.acknowledge(InteractionResponse.channel_message({"content": "ok"}))
    assert machine.initial_response is response


def test_shared_capture_cell_reflects_latest_response():
    capture = ResponseCapture()
    machine = _machine(capture=capture, channel=RecordingChannel())

    machine.defer_reply()
    machine.edit_reply({"content": "final"})

    assert capture.get().data == {"content": "final"}
    assert capture.is_empty is False


def test_acknowledgement_is_logged():
    machine = _machine()

    with capture_logs() as logs:
        machine.defer_reply()

    assert any(
        entry["event"] == "interaction_deferred" and entry["interaction_id"] == "1" for entry in logs
    )


def test_captured_response_cannot_be_modified_by_handler():
    machine = _machine()

    response = machine.reply({"content": "x"})
    with pytest.raises(TypeError):
        response.data["content"] = "tampered"

    assert machine.get_response().to_dict() == {"type": 4, "data": {"content": "x"}}
    assert machine.initial_response.to_dict() == {"type": 4, "data": {"content": "x"}}

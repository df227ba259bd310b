from __future__ import annotations

import asyncio

import pytest

from warehouse_entry.chooser.controller import ChooserController, ChooserState
from warehouse_entry.config import Settings
from warehouse_entry.domain.models import QUERYABLE_FIELDS, RECORD_FIELDS, Record
from warehouse_entry.widget import WarehouseForm, WidgetConfig


def _response(*records):
    return {
        "items": [
            {"recordType": "warehouse", "containerId": 1, "positionIndex": i, "data": data}
            for i, data in enumerate(records)
        ]
    }


def _form(test_settings, notifier, query=None, data=None) -> WarehouseForm:
    config = WidgetConfig(
        query_records=query,
        get_now_label=lambda: "2024-01-01 10:00:00",
        get_current_user_label=lambda: "alice",
    )
    form = WarehouseForm(data=data, config=config, notifier=notifier, settings=test_settings)
    form.render()
    return form


@pytest.mark.asyncio
async def test_open_without_capability_warns_and_stays_closed(test_settings, notifier) -> None:
    form = _form(test_settings, notifier)

    await form.open_chooser()

    assert form.chooser.state is ChooserState.CLOSED
    assert form.chooser.view is None
    assert notifier.styles == ["warning"]


@pytest.mark.asyncio
async def test_open_uses_focused_field_and_its_text(test_settings, notifier, fake_query) -> None:
    form = _form(test_settings, notifier, fake_query)
    form.view.find("sku").html = " AB12 "
    form.focus("sku")

    await form.open_chooser()

    assert len(fake_query.requests) == 1
    assert fake_query.requests[0].to_wire() == {
        "recordType": "warehouse",
        "field": "sku",
        "q": "AB12",
        "limit": 200,
    }
    view = form.chooser.view
    assert [value for value, _ in view.field_options] == list(QUERYABLE_FIELDS)
    assert view.selected_field == "sku"
    assert view.visible is True
    assert form.chooser.state is ChooserState.OPEN_IDLE


@pytest.mark.asyncio
async def test_open_defaults_to_first_field_without_focus(test_settings, notifier, fake_query) -> None:
    form = _form(test_settings, notifier, fake_query)

    await form.open_chooser()

    request = fake_query.requests[0]
    assert request.field == "sku"
    assert request.q == ""


@pytest.mark.asyncio
async def test_non_queryable_focus_keeps_default_field_but_seeds_text(
    test_settings, notifier, fake_query
) -> None:
    form = _form(test_settings, notifier, fake_query)
    form.view.find("quantity").html = "12"
    form.focus("quantity")

    await form.open_chooser()

    assert fake_query.requests[0].field == "sku"
    assert fake_query.requests[0].q == "12"


@pytest.mark.asyncio
async def test_second_open_only_toggles_visibility(test_settings, notifier, fake_query) -> None:
    form = _form(test_settings, notifier, fake_query)

    await form.open_chooser()
    await form.open_chooser()
    assert form.chooser.view.visible is False
    await form.open_chooser()
    assert form.chooser.view.visible is True

    assert len(fake_query.requests) == 1


@pytest.mark.asyncio
async def test_successful_query_replaces_results(
    test_settings, notifier, query_factory, block_data
) -> None:
    first = block_data(sku="A1")
    second = block_data(sku="A2")
    query = query_factory([_response(first, second), _response(second)])
    form = _form(test_settings, notifier, query)

    await form.open_chooser()
    assert [r.sku for r in form.chooser.items] == ["A1", "A2"]
    assert len(form.chooser.view.rows) == 2
    assert form.chooser.view.rows[0] == [first[key] for key in RECORD_FIELDS]

    await form.chooser.query("sku", "A2")
    assert [r.sku for r in form.chooser.items] == ["A2"]
    assert len(form.chooser.view.rows) == 1


@pytest.mark.asyncio
async def test_query_failure_keeps_rows_and_notifies(
    test_settings, notifier, query_factory, block_data
) -> None:
    query = query_factory([_response(block_data(sku="A1")), ConnectionError("store down")])
    form = _form(test_settings, notifier, query)
    await form.open_chooser()
    rows_before = [list(row) for row in form.chooser.view.rows]

    await form.chooser.query("sku", "B")

    assert form.chooser.view.rows == rows_before
    assert [r.sku for r in form.chooser.items] == ["A1"]
    assert notifier.styles == ["error"]
    assert form.chooser.state is ChooserState.OPEN_IDLE


@pytest.mark.asyncio
async def test_malformed_response_is_reported_as_failure(
    test_settings, notifier, query_factory
) -> None:
    form = _form(test_settings, notifier, query_factory([None]))

    await form.open_chooser()

    assert notifier.styles == ["error"]
    assert form.chooser.items == []


@pytest.mark.asyncio
async def test_non_list_items_mean_no_results(test_settings, notifier, query_factory) -> None:
    form = _form(test_settings, notifier, query_factory([{"items": "nope"}]))

    await form.open_chooser()

    assert form.chooser.items == []
    assert notifier.messages == []


@pytest.mark.asyncio
async def test_bad_item_location_still_renders_row(
    test_settings, notifier, query_factory, block_data
) -> None:
    items = [
        {
            "recordType": "warehouse",
            "containerId": None,
            "positionIndex": "x",
            "data": block_data(sku="A1"),
        },
        {"recordType": None, "containerId": "7", "positionIndex": 2.0, "data": "junk"},
        None,
    ]
    form = _form(test_settings, notifier, query_factory([{"items": items}]))

    await form.open_chooser()

    assert [r.sku for r in form.chooser.items] == ["A1", ""]
    assert form.chooser.view.rows[0][RECORD_FIELDS.index("sku")] == "A1"
    assert len(form.chooser.view.rows) == 2
    assert notifier.messages == []


@pytest.mark.asyncio
async def test_run_query_uses_view_state(test_settings, notifier, fake_query) -> None:
    form = _form(test_settings, notifier, fake_query)
    await form.open_chooser()
    form.chooser.view.selected_field = "supplier"
    form.chooser.view.query_text = "  ac "

    await form.chooser.run_query()

    assert fake_query.requests[-1].field == "supplier"
    assert fake_query.requests[-1].q == "ac"


@pytest.mark.asyncio
async def test_state_is_querying_while_request_is_outstanding(
    test_settings, notifier, fake_query
) -> None:
    form = _form(test_settings, notifier, fake_query)
    gate = fake_query.gate_next()

    task = asyncio.create_task(form.open_chooser())
    await asyncio.sleep(0)
    assert form.chooser.state is ChooserState.OPEN_QUERYING

    gate.set()
    await task
    assert form.chooser.state is ChooserState.OPEN_IDLE


@pytest.mark.asyncio
async def test_concurrent_queries_last_completion_wins(
    test_settings, notifier, query_factory, block_data
) -> None:
    query = query_factory(
        [_response(), _response(block_data(sku="OLD")), _response(block_data(sku="NEW"))]
    )
    query.gate_next().set()
    slow, fast = query.gate_next(), query.gate_next()
    controller = _form(test_settings, notifier, query).chooser
    await controller.open()

    first = asyncio.create_task(controller.query("sku", "O"))
    second = asyncio.create_task(controller.query("sku", "N"))
    await asyncio.sleep(0)
    fast.set()
    await second
    slow.set()
    await first

    assert [r.sku for r in controller.items] == ["OLD"]


@pytest.mark.asyncio
async def test_sequenced_queries_drop_stale_completion(notifier, query_factory, block_data) -> None:
    query = query_factory(
        [_response(), _response(block_data(sku="OLD")), _response(block_data(sku="NEW"))]
    )
    query.gate_next().set()
    slow, fast = query.gate_next(), query.gate_next()
    settings = Settings(_env_file=None, WAREHOUSE_SEQUENCE_QUERIES=True)
    controller = _form(settings, notifier, query).chooser
    await controller.open()

    first = asyncio.create_task(controller.query("sku", "O"))
    second = asyncio.create_task(controller.query("sku", "N"))
    await asyncio.sleep(0)
    fast.set()
    await second
    slow.set()
    await first

    assert [r.sku for r in controller.items] == ["NEW"]


@pytest.mark.asyncio
async def test_select_replaces_whole_record_including_provenance(
    test_settings, notifier, query_factory, block_data
) -> None:
    chosen = block_data(sku="PICK", createdAt="2020-02-02 02:02:02", createdBy="zoe")
    form = _form(test_settings, notifier, query_factory([_response(chosen)]))
    assert form.data.created_by == "alice"

    await form.open_chooser()
    form.chooser.select_row(0)

    assert form.data.to_persisted() == chosen
    assert {el.field: el.html for el in form.view} == chosen
    assert form.chooser.state is ChooserState.CLOSED
    assert form.chooser.view.visible is False
    assert form.save().to_persisted() == chosen


@pytest.mark.asyncio
async def test_reopen_after_select_queries_again(test_settings, notifier, fake_query) -> None:
    form = _form(test_settings, notifier, fake_query)
    await form.open_chooser()
    form.chooser.select(Record())

    await form.open_chooser()

    assert len(fake_query.requests) == 2
    assert form.chooser.view.visible is True


@pytest.mark.asyncio
async def test_late_completion_after_detach_does_not_touch_view(
    test_settings, notifier, query_factory, block_data
) -> None:
    query = query_factory([_response(block_data(sku="LATE"))])
    gate = query.gate_next()
    form = _form(test_settings, notifier, query)

    task = asyncio.create_task(form.open_chooser())
    await asyncio.sleep(0)
    view = form.chooser.view
    form.detach()
    gate.set()
    await task

    assert view.attached is False
    assert view.rows == []
    assert form.chooser.state is ChooserState.CLOSED


def test_select_accepts_mapping_and_tolerates_unrendered_form(
    test_settings, notifier, block_data
) -> None:
    form = WarehouseForm(data=None, notifier=notifier, settings=test_settings)
    record = form.chooser.select(block_data(sku="MAP"))

    assert isinstance(record, Record)
    assert form.data.sku == "MAP"


def test_settings_drive_request_shape(notifier) -> None:
    settings = Settings(_env_file=None, WAREHOUSE_RECORD_TYPE="stock", WAREHOUSE_QUERY_LIMIT=5)
    form = WarehouseForm(data=None, notifier=notifier, settings=settings)
    assert form.chooser.record_type == "stock"
    assert form.chooser.limit == 5


@pytest.mark.asyncio
async def test_query_while_closed_issues_no_request(test_settings, notifier, fake_query) -> None:
    controller = ChooserController(_form(test_settings, notifier), query_records=fake_query)

    await controller.query("sku", "AB")

    assert fake_query.requests == []
    assert controller.state is ChooserState.CLOSED
    assert controller.items == []


@pytest.mark.asyncio
async def test_query_after_select_is_ignored(test_settings, notifier, fake_query) -> None:
    form = _form(test_settings, notifier, fake_query)
    await form.open_chooser()
    form.chooser.select(Record(sku="KEEP"))

    await form.chooser.query("sku", "X")

    assert len(fake_query.requests) == 1
    assert form.chooser.state is ChooserState.CLOSED

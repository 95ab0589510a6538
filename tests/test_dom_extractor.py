from __future__ import annotations

from bs4 import BeautifulSoup

from form_bridge.extraction.dom_extractor import (
    extract_form_schema,
    extract_form_schema_from_html,
    resolve_field_label,
    wrap_form_fragment,
)
from form_bridge.extraction.models import FieldOption

ACTION = "https://docs.google.com/forms/d/e/abc/formResponse"

QUESTION_LIST_HTML = f"""
<html><body>
<form action="{ACTION}" method="POST">
  <div role="list">
    <div role="listitem">
      <div role="heading"> Student ID </div>
      <input type="text" name="entry.1" aria-required="true">
    </div>
    <div role="listitem">
      <div role="heading">Full name</div>
      <input name="entry.2">
    </div>
    <div role="listitem">
      <div role="heading">Nickname</div>
      <textarea name="entry.3"></textarea>
    </div>
    <div role="listitem">
      <div role="heading">Favourite colour</div>
      <input type="hidden" name="entry.9_sentinel">
      <div role="radiogroup" aria-required="true">
        <div role="radio" aria-label="A"></div>
        <div role="radio" aria-label="B"></div>
        <div role="radio"> C </div>
        <div role="radio"></div>
      </div>
    </div>
  </div>
  <input type="hidden" name="fvv" value="1">
  <input type="hidden" name="fbzx" value="-4242">
  <input type="hidden" value="nameless">
</form>
</body></html>
"""


def test_extract_collects_action_hidden_params_and_fields_in_order() -> None:
    schema = extract_form_schema_from_html(QUESTION_LIST_HTML)

    assert schema.action == ACTION
    assert schema.hidden_params == {
        "entry.9_sentinel": "",
        "fvv": "1",
        "fbzx": "-4242",
    }
    assert schema.fbzx == "-4242"
    assert schema.field_names() == ["entry.1", "entry.2", "entry.3", "entry.9"]


def test_extract_resolves_types_labels_and_required() -> None:
    fields = {item.name: item for item in extract_form_schema_from_html(QUESTION_LIST_HTML).fields}

    assert fields["entry.1"].type == "text"
    assert fields["entry.1"].label == "Student ID"
    assert fields["entry.1"].required is True
    assert fields["entry.2"].type == "text"
    assert fields["entry.2"].required is False
    assert fields["entry.3"].type == "textarea"
    assert fields["entry.3"].options == []


def test_extract_builds_radio_field_from_sentinel_group() -> None:
    fields = {item.name: item for item in extract_form_schema_from_html(QUESTION_LIST_HTML).fields}

    radio = fields["entry.9"]
    assert radio.type == "radio"
    assert radio.label == "Favourite colour"
    assert radio.required is True
    assert radio.options == [
        FieldOption("A", "A"),
        FieldOption("B", "B"),
        FieldOption("C", "C"),
    ]


def test_sentinel_group_overwrites_plain_entry_in_place() -> None:
    markup = f"""
    <form action="{ACTION}">
      <div role="listitem">
        <div role="heading">Pick one</div>
        <input type="hidden" name="entry.9">
        <input type="hidden" name="entry.9_sentinel">
        <div role="radiogroup">
          <div role="radio" aria-label="A"></div>
          <div role="radio" aria-label="B"></div>
          <div role="radio" aria-label="C"></div>
        </div>
      </div>
      <div role="listitem">
        <div role="heading">Comment</div>
        <input type="text" name="entry.10">
      </div>
    </form>
    """

    schema = extract_form_schema_from_html(markup)

    assert schema.field_names() == ["entry.9", "entry.10"]
    radio = schema.fields[0]
    assert radio.type == "radio"
    assert radio.required is False
    assert [option.value for option in radio.options] == ["A", "B", "C"]


def test_sentinel_without_radio_options_is_dropped() -> None:
    markup = f"""
    <form action="{ACTION}">
      <div role="listitem">
        <div role="heading">Orphan</div>
        <input type="hidden" name="entry.5_sentinel">
      </div>
    </form>
    """

    schema = extract_form_schema_from_html(markup)

    assert schema.fields == []
    assert schema.hidden_params == {"entry.5_sentinel": ""}


def test_select_options_preserve_order_and_empty_values() -> None:
    markup = f"""
    <form action="{ACTION}">
      <div>
        <label> Pick a size </label>
        <select name="entry.5" required>
          <option value="v1"> l1 </option>
          <option>l2</option>
        </select>
      </div>
    </form>
    """

    schema = extract_form_schema_from_html(markup)

    assert len(schema.fields) == 1
    select = schema.fields[0]
    assert select.type == "select"
    assert select.label == "Pick a size"
    assert select.required is True
    assert select.options == [FieldOption("v1", "l1"), FieldOption("", "l2")]


def test_label_falls_back_to_aria_label_then_name() -> None:
    markup = f"""
    <form action="{ACTION}">
      <input name="entry.6" aria-label=" Phone ">
      <input name="entry.7" type="email">
    </form>
    """

    schema = extract_form_schema_from_html(markup)

    assert [(item.name, item.label, item.type) for item in schema.fields] == [
        ("entry.6", "Phone", "text"),
        ("entry.7", "entry.7", "email"),
    ]


def test_resolve_field_label_prefers_list_item_heading() -> None:
    soup = BeautifulSoup(
        """
        <div role="listitem">
          <div role="heading">Question heading</div>
          <div><label>Inner label</label><input name="entry.1"></div>
        </div>
        """,
        "html.parser",
    )

    assert resolve_field_label(soup.find("input")) == "Question heading"


def test_resolve_field_label_skips_blank_heading() -> None:
    soup = BeautifulSoup(
        """
        <div role="listitem">
          <div role="heading">   </div>
          <div><label>Inner label</label><input name="entry.1"></div>
        </div>
        """,
        "html.parser",
    )

    assert resolve_field_label(soup.find("input")) == "Inner label"


def test_non_entry_names_are_ignored() -> None:
    markup = f"""
    <form action="{ACTION}">
      <input name="entry.abc">
      <input name="emailAddress">
      <input name="entry.12">
    </form>
    """

    schema = extract_form_schema_from_html(markup)

    assert schema.field_names() == ["entry.12"]


def test_prefers_form_posting_to_response_endpoint() -> None:
    markup = f"""
    <form action="/search"><input name="entry.1"></form>
    <form action="{ACTION}"><input name="entry.2"></form>
    """

    schema = extract_form_schema_from_html(markup)

    assert schema.action == ACTION
    assert schema.field_names() == ["entry.2"]


def test_falls_back_to_first_form_then_whole_document() -> None:
    first = extract_form_schema_from_html(
        '<form action="/a"><input name="entry.1"></form><form action="/b"></form>'
    )
    assert first.action == "/a"
    assert first.field_names() == ["entry.1"]

    formless = extract_form_schema_from_html(
        '<div><input type="hidden" name="fbzx" value="7"><input name="entry.3"></div>'
    )
    assert formless.action == ""
    assert formless.fbzx == "7"
    assert formless.field_names() == ["entry.3"]


def test_empty_markup_degrades_to_empty_schema() -> None:
    schema = extract_form_schema_from_html("")

    assert schema.is_empty is True


def test_duplicate_hidden_names_keep_last_value() -> None:
    markup = f"""
    <form action="{ACTION}">
      <input type="hidden" name="pageHistory" value="0">
      <input type="hidden" name="pageHistory" value="0,1">
    </form>
    """

    assert extract_form_schema_from_html(markup).hidden_params == {"pageHistory": "0,1"}


def test_extraction_is_repeatable_on_same_tree() -> None:
    soup = BeautifulSoup(QUESTION_LIST_HTML, "html.parser")

    first = extract_form_schema(soup)
    second = extract_form_schema(soup)

    assert first.to_dict() == second.to_dict()
    assert first.to_dict() == extract_form_schema_from_html(QUESTION_LIST_HTML).to_dict()


def test_wrapped_fragment_round_trips_through_extractor() -> None:
    fragment = f'<form action="{ACTION}"><input name="entry.4"></form>'

    schema = extract_form_schema_from_html(wrap_form_fragment(fragment))

    assert schema.action == ACTION
    assert schema.field_names() == ["entry.4"]


def test_native_radio_inputs_fold_into_one_field_with_options() -> None:
    schema = extract_form_schema_from_html(
        f"""
        <form action="{ACTION}">
          <div role="listitem">
            <div role="heading">Shirt size</div>
            <label><input type="radio" name="entry.4" value="S"> Small </label>
            <label><input type="radio" name="entry.4" value="M" required> Medium</label>
            <input type="radio" name="entry.4" value="L" aria-label="Large">
            <input type="radio" name="entry.4" value="S">
            <input type="radio" name="entry.4">
          </div>
          <input name="entry.5" aria-label="Notes">
        </form>
        """
    )

    assert schema.field_names() == ["entry.4", "entry.5"]
    size = schema.fields[0]
    assert size.type == "radio"
    assert size.label == "Shirt size"
    assert size.required is True
    assert size.options == [
        FieldOption(value="S", label="Small"),
        FieldOption(value="M", label="Medium"),
        FieldOption(value="L", label="Large"),
    ]
    assert size.to_dict()["options"][0] == {"value": "S", "label": "Small"}

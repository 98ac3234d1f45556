import pytest

from dynaform.engine import FormEngine, resolve_default
from dynaform.exceptions import (
    FormClosedError,
    HiddenFieldError,
    InvalidValueError,
    UnknownFieldError,
)
from dynaform.views import FormPhase


def _fill_required(engine: FormEngine) -> None:
    engine.set_value("firstName", "Ada")
    engine.set_value("email", "ada@example.com")


def _married_with_children(engine: FormEngine) -> None:
    engine.set_value("maritalStatus", "Married")
    engine.set_value("spouseName", "Pat")
    engine.set_value("children", "Yes")


def test_mount_seeds_defaults_per_type(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)

    assert engine.phase is FormPhase.initial
    assert engine.errors == {}
    assert engine.state == {
        "firstName": "",
        "email": "",
        "maritalStatus": "Single",
        "gender": "",
        "phone": "",
        "newsletter": False,
    }


def test_resolve_default_honours_default_checked(personal_catalog) -> None:
    assert resolve_default(personal_catalog.get("children")) == "No"
    assert resolve_default(personal_catalog.get("maritalStatus")) == "Single"
    assert resolve_default(personal_catalog.get("newsletter")) is False


def test_email_end_to_end(email_catalog) -> None:
    engine = FormEngine(email_catalog)

    engine.set_value("email", "a@b")
    result = engine.submit()
    assert not result.valid
    assert result.error_kinds == {"email": "format"}
    assert result.values is None
    assert engine.phase is FormPhase.rejected

    engine.set_value("email", "a@b.com")
    result = engine.submit()
    assert result.valid
    assert result.values == {"email": "a@b.com"}
    assert engine.phase is FormPhase.submitted


def test_empty_required_field_blocks_only_itself(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    engine.set_value("email", "ada@example.com")

    result = engine.submit()

    assert not result.valid
    assert result.errors == {"firstName": "First Name is required"}
    assert result.error_kinds == {"firstName": "required"}


def test_rejection_keeps_values(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    engine.set_value("email", "not-an-email")
    engine.set_value("newsletter", True)

    engine.submit()

    assert engine.state["email"] == "not-an-email"
    assert engine.state["newsletter"] is True


def test_single_submits_without_spouse_name(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    _fill_required(engine)
    engine.set_value("maritalStatus", "Single")

    result = engine.submit()

    assert result.valid
    assert "spouseName" not in result.values


def test_hidden_field_is_exempt_from_validation(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    _fill_required(engine)
    engine.set_value("maritalStatus", "Married")

    result = engine.submit()
    assert not result.valid
    assert set(result.errors) == {"spouseName"}

    engine.set_value("maritalStatus", "Single")
    assert engine.errors == {}
    assert engine.submit().valid


def test_gating_change_clears_dependents(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    _married_with_children(engine)
    engine.set_item("childrenNames", 0, "Ann")

    engine.set_value("maritalStatus", "Single")

    for key in ("spouseName", "children", "childrenNames"):
        assert key not in engine.state

    engine.set_value("maritalStatus", "Married")
    assert engine.state["spouseName"] == ""
    assert engine.state["children"] == "No"
    assert "childrenNames" not in engine.state


def test_children_gate_opens_and_closes_the_list(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    _married_with_children(engine)
    assert engine.state["childrenNames"] == [""]

    engine.set_item("childrenNames", 0, "Ann")
    engine.append_item("childrenNames")
    engine.set_item("childrenNames", 1, "Ben")
    assert engine.state["childrenNames"] == ["Ann", "Ben"]

    engine.set_value("children", "No")
    assert "childrenNames" not in engine.state

    engine.set_value("children", "Yes")
    assert engine.state["childrenNames"] == [""]


def test_list_entries_are_validated_while_open(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    _fill_required(engine)
    _married_with_children(engine)
    engine.append_item("childrenNames")
    engine.set_item("childrenNames", 0, "Ann")

    result = engine.submit()

    assert result.errors == {"childrenNames.1": "Child 2 Name is required"}

    engine.set_item("childrenNames", 1, "Ben")
    result = engine.submit()
    assert result.valid
    assert result.values["childrenNames"] == ["Ann", "Ben"]


def test_removing_an_entry_drops_list_errors(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    _married_with_children(engine)
    engine.append_item("childrenNames")
    engine.submit()
    assert "childrenNames.0" in engine.errors

    engine.remove_item("childrenNames", 1)

    assert not any(key.startswith("childrenNames.") for key in engine.errors)
    assert engine.state["childrenNames"] == [""]


def test_edit_clears_only_its_own_error(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    engine.submit()
    assert set(engine.errors) == {"firstName", "email"}

    engine.set_value("firstName", "Ada")

    assert set(engine.errors) == {"email"}
    assert engine.phase is FormPhase.editing


def test_snapshot_places_list_after_its_gate(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    _fill_required(engine)
    _married_with_children(engine)
    engine.set_item("childrenNames", 0, "Ann")

    values = engine.submit().values

    keys = list(values)
    assert keys.index("childrenNames") == keys.index("children") + 1
    assert values["spouseName"] == "Pat"


def test_unknown_field_is_rejected(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    with pytest.raises(UnknownFieldError):
        engine.set_value("nickname", "Ada")
    with pytest.raises(UnknownFieldError):
        engine.append_item("petNames")


def test_hidden_field_cannot_be_edited(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    with pytest.raises(HiddenFieldError):
        engine.set_value("spouseName", "Pat")
    with pytest.raises(HiddenFieldError):
        engine.append_item("childrenNames")


def test_values_are_type_checked(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    with pytest.raises(InvalidValueError):
        engine.set_value("maritalStatus", "Divorced")
    with pytest.raises(InvalidValueError):
        engine.set_value("newsletter", "yes")
    with pytest.raises(InvalidValueError):
        engine.set_value("firstName", True)


def test_select_can_be_cleared(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    engine.set_value("gender", "female")
    engine.set_value("gender", "")
    assert engine.state["gender"] == ""


def test_submitted_form_is_closed(email_catalog) -> None:
    engine = FormEngine(email_catalog)
    engine.set_value("email", "a@b.com")
    assert engine.submit().valid

    with pytest.raises(FormClosedError):
        engine.set_value("email", "c@d.com")
    with pytest.raises(FormClosedError):
        engine.submit()


def test_render_describes_visible_controls(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    _married_with_children(engine)
    engine.append_item("childrenNames")

    view = engine.render()
    controls = {control.name: control for control in view.controls}

    assert list(controls)[:5] == ["firstName", "email", "maritalStatus", "spouseName", "children"]
    assert controls["phone"].control == "input"
    assert controls["phone"].input_type == "tel"
    assert controls["maritalStatus"].control == "radio-group"
    assert [o.value for o in controls["maritalStatus"].options] == ["Single", "Married"]
    assert controls["gender"].options[0].label == "Female"
    assert controls["newsletter"].control == "checkbox"
    assert controls["email"].required

    children = controls["children"]
    assert children.list_key == "childrenNames"
    assert [item.label for item in children.items] == ["Child 1 Name", "Child 2 Name"]
    assert children.items[1].placeholder == "Enter name of child 2"
    assert controls["firstName"].items is None


def test_render_attaches_errors(personal_catalog) -> None:
    engine = FormEngine(personal_catalog)
    engine.submit()

    view = engine.render()
    controls = {control.name: control for control in view.controls}

    assert view.phase is FormPhase.rejected
    assert controls["firstName"].error == "First Name is required"
    assert controls["phone"].error is None


def test_trailing_newline_is_not_a_valid_email(email_catalog) -> None:
    engine = FormEngine(email_catalog)
    engine.set_value("email", "a@b.com\n")

    result = engine.submit()

    assert not result.valid
    assert result.error_kinds == {"email": "format"}

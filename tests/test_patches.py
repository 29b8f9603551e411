"""
Tests for the headword-keyed data patch layer.
"""
import logging

import pytest

from lexicon_ingest import (
    Definition,
    Example,
    IntegrityIssue,
    IssueType,
    Lemma,
    PatchTableError,
    Sense,
    Subentry,
    audit_definition_markup,
    audit_definitions,
)
from lexicon_ingest.patches import (
    APPLICATION_ORDER,
    PLACEHOLDER_GLOSS,
    PatchStep,
    PatchTable,
    RepairOperation,
    apply_patches,
    apply_patches_with_report,
    default_patch_table,
    dump_patch_table,
    load_patch_table,
    suggest_patch_table,
    validate_patch_table,
)
from lexicon_ingest.patches.operations import (
    drop_dead_definitions,
    drop_empty_examples,
    inject_placeholder_gloss,
    inject_usage_mark,
    relocate_misplaced_example,
    repair_cross_reference,
)


def _lemma(*definitions, headword="x", subentries=None):
    return Lemma(
        lemma_sign=headword,
        senses=[Sense(definitions=list(definitions))],
        subentries=subentries or [],
    )


def _step(operation, **params):
    return PatchStep(operation=operation.value, params=params)


class TestLoader:
    """Tests for YAML loading."""

    def test_load_from_string(self):
        """Test loading a table from a YAML string."""
        yaml_content = """
description: Test table
patches:
  Pan:
    - drop_dead_definitions
  llevar:
    - operation: relocate_misplaced_example
      subentry: [llevar, mal andar]
      prefix: Esos
"""
        table = load_patch_table(yaml_content)

        assert table.description == "Test table"
        assert len(table) == 2
        assert "pan" in table
        assert " PAN " in table
        assert table.rules["llevar"][0].params["subentry"] == ["llevar", "mal andar"]

    def test_load_from_file(self, tmp_path):
        """Test loading a table from a file."""
        yaml_file = tmp_path / "table.yaml"
        yaml_file.write_text("patches:\n  taza: drop_empty_examples\n", encoding="utf-8")

        table = load_patch_table(yaml_file)

        assert table.source_file == yaml_file
        assert table.rules["taza"][0].operation == "drop_empty_examples"

    def test_load_from_dict(self):
        table = load_patch_table({"patches": {"pan": ["drop_dead_definitions"]}})
        assert table.steps_for("pan")[0].repair is RepairOperation.DROP_DEAD_DEFINITIONS

    def test_empty_patches_allowed(self):
        assert len(load_patch_table("patches: {}\n")) == 0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_patch_table(tmp_path / "nope.yaml")

    def test_invalid_yaml_reports_line(self):
        with pytest.raises(PatchTableError) as exc_info:
            load_patch_table("patches:\n  pan: [drop_dead_definitions\n")
        assert exc_info.value.line is not None

    @pytest.mark.parametrize("content, match", [
        ("\n", "Empty"),
        ("- a\n- b\n", "mapping"),
        ("description: x\n", "patches"),
        ("patches: [pan]\n", "mapping"),
        ("patches:\n  pan: []\n", "non-empty"),
        ("patches:\n  pan:\n    - trigger: persona\n", "operation"),
        ("patches:\n  pan:\n    - 3\n", "string or a mapping"),
    ])
    def test_malformed_tables(self, content, match):
        with pytest.raises(PatchTableError, match=match):
            load_patch_table(content)

    def test_default_table_is_valid(self):
        table = default_patch_table()

        assert len(table) > 0
        assert validate_patch_table(table).is_valid

    def test_dump_round_trip(self):
        table = default_patch_table()
        reloaded = load_patch_table(dump_patch_table(table))

        assert reloaded.rules == table.rules
        assert reloaded.description == table.description


class TestSchema:
    def test_steps_sorted_in_application_order(self):
        table = load_patch_table({"patches": {"x": [
            "drop_empty_examples",
            "drop_dead_definitions",
            {"operation": "inject_usage_mark", "trigger": "a", "mark": "b"},
        ]}})

        assert [s.operation for s in table.steps_for("X")] == [
            "inject_usage_mark",
            "drop_dead_definitions",
            "drop_empty_examples",
        ]

    def test_application_order_is_enum_order(self):
        assert APPLICATION_ORDER[0] is RepairOperation.INJECT_USAGE_MARK
        assert APPLICATION_ORDER[-1] is RepairOperation.DROP_EMPTY_EXAMPLES

    def test_unknown_headword_has_no_steps(self):
        assert PatchTable().steps_for("casa") == []


class TestOperations:
    """Tests for the individual repair operations."""

    def test_drop_dead_definitions(self):
        lemma = _lemma(
            Definition(text="Alimento."),
            Definition(text="", examples=[Example(text=":")]),
        )
        patched = drop_dead_definitions(lemma, _step(RepairOperation.DROP_DEAD_DEFINITIONS))

        assert [d.text for d in patched.senses[0].definitions] == ["Alimento."]
        assert len(lemma.senses[0].definitions) == 2

    def test_drop_dead_keeps_ghost(self):
        lemma = _lemma(Definition(text="", examples=[Example(text="Contenido.")]))
        patched = drop_dead_definitions(lemma, _step(RepairOperation.DROP_DEAD_DEFINITIONS))
        assert patched == lemma

    def test_inject_placeholder_gloss(self):
        lemma = _lemma(Definition(text=""), Definition(text="Algo."))
        patched = inject_placeholder_gloss(lemma, _step(RepairOperation.INJECT_PLACEHOLDER_GLOSS))
        definitions = patched.senses[0].definitions

        assert definitions[0].text == PLACEHOLDER_GLOSS
        assert definitions[0].plain_text == PLACEHOLDER_GLOSS
        assert definitions[1].text == "Algo."

    def test_repair_cross_reference(self):
        lemma = _lemma(Definition(text="<b>checa</b>"))
        patched = repair_cross_reference(lemma, _step(RepairOperation.REPAIR_CROSS_REFERENCE))
        assert patched.senses[0].definitions[0].text == "<b>checa +</b>"

    def test_repair_cross_reference_skips_long_and_marked(self):
        long_gloss = "Persona que vive en el campo y trabaja la tierra de sol a sol."
        lemma = _lemma(Definition(text=long_gloss), Definition(text="<b>otra +</b>"))
        patched = repair_cross_reference(lemma, _step(RepairOperation.REPAIR_CROSS_REFERENCE))
        assert patched == lemma

    def test_repair_cross_reference_skips_placeholder(self):
        lemma = _lemma(Definition(text=PLACEHOLDER_GLOSS))
        patched = repair_cross_reference(lemma, _step(RepairOperation.REPAIR_CROSS_REFERENCE))
        assert patched == lemma

    def test_drop_empty_examples_reaches_subentries(self):
        sub = Subentry(sign="a b", senses=[Sense(definitions=[
            Definition(text="Algo.", examples=[Example(text=":"), Example(text="Sí.")]),
        ])])
        lemma = _lemma(
            Definition(text="Algo.", examples=[Example(text="")]),
            subentries=[sub],
        )
        patched = drop_empty_examples(lemma, _step(RepairOperation.DROP_EMPTY_EXAMPLES))

        assert patched.senses[0].definitions[0].examples == []
        assert [e.text for e in patched.subentries[0].senses[0].definitions[0].examples] == ["Sí."]

    def test_relocate_misplaced_example(self):
        sub = Subentry(sign="<b>llevar</b> a mal andar", senses=[Sense(definitions=[
            Definition(text="Esos problemas lo llevaron a mal andar."),
        ])])
        lemma = _lemma(Definition(text="Conducir."), headword="llevar", subentries=[sub])
        step = _step(
            RepairOperation.RELOCATE_MISPLACED_EXAMPLE,
            subentry=["llevar", "mal andar"],
            prefix="Esos problemas",
        )
        patched = relocate_misplaced_example(lemma, step)
        definition = patched.subentries[0].senses[0].definitions[0]

        assert definition.text == PLACEHOLDER_GLOSS
        assert definition.examples[0].text == "Esos problemas lo llevaron a mal andar."
        assert definition.examples[0].is_ad_hoc
        assert definition.examples[0].ad_hoc_label == "Ad hoc"
        assert patched.senses == lemma.senses

    def test_relocate_without_matching_subentry_warns(self, caplog):
        lemma = _lemma(Definition(text="Conducir."), headword="llevar")
        step = _step(
            RepairOperation.RELOCATE_MISPLACED_EXAMPLE,
            subentry="mal andar",
            prefix="Esos",
        )
        with caplog.at_level(logging.WARNING, logger="lexicon_ingest.patches.operations"):
            patched = relocate_misplaced_example(lemma, step)

        assert patched == lemma
        assert "No subentry" in caplog.text

    def test_inject_usage_mark(self):
        lemma = _lemma(
            Definition(text="Persona del campo."),
            Definition(text="Personaje de cuento."),
            Definition(text="Persona rústica.", utc="U.t.c.adj."),
        )
        step = _step(RepairOperation.INJECT_USAGE_MARK, trigger="persona", mark="U.t.c.adj.")
        patched = inject_usage_mark(lemma, step)

        assert [d.utc for d in patched.senses[0].definitions] == [
            "U.t.c.adj.", None, "U.t.c.adj.",
        ]

    @pytest.mark.parametrize("operation, step", [
        (drop_dead_definitions, _step(RepairOperation.DROP_DEAD_DEFINITIONS)),
        (inject_placeholder_gloss, _step(RepairOperation.INJECT_PLACEHOLDER_GLOSS)),
        (repair_cross_reference, _step(RepairOperation.REPAIR_CROSS_REFERENCE)),
        (drop_empty_examples, _step(RepairOperation.DROP_EMPTY_EXAMPLES)),
        (inject_usage_mark, _step(
            RepairOperation.INJECT_USAGE_MARK, trigger="persona", mark="U.t.c.adj.",
        )),
    ])
    def test_operations_idempotent(self, operation, step):
        lemma = _lemma(
            Definition(text="Persona corta."),
            Definition(text="", examples=[Example(text=":")]),
            Definition(text="", examples=[Example(text="Contenido.")]),
        )
        once = operation(lemma, step)
        assert operation(once, step) == once


class TestValidator:
    def test_unknown_operation(self):
        table = load_patch_table({"patches": {"pan": ["bake"]}})
        result = validate_patch_table(table)

        assert not result.is_valid
        assert result.errors[0].field == "operation"

    def test_missing_required_params(self):
        table = load_patch_table({"patches": {"x": [
            {"operation": "inject_usage_mark", "trigger": "persona"},
        ]}})
        result = validate_patch_table(table)

        assert [e.field for e in result.errors] == ["mark"]

    def test_subentry_type_checked(self):
        table = load_patch_table({"patches": {"x": [
            {"operation": "relocate_misplaced_example", "subentry": 3, "prefix": "a"},
        ]}})
        assert [e.field for e in validate_patch_table(table).errors] == ["subentry"]

    def test_unknown_param_warns(self):
        table = load_patch_table({"patches": {"x": [
            {"operation": "drop_dead_definitions", "force": True},
        ]}})
        result = validate_patch_table(table)

        assert result.is_valid
        assert result.warning_count == 1

    def test_cross_check_against_audit(self, sample_path):
        table = load_patch_table({"patches": {
            "pan": ["drop_dead_definitions"],
            "casa": ["drop_dead_definitions"],
            "chagra": [{"operation": "inject_usage_mark", "trigger": "persona", "mark": "U.t.c.adj."}],
        }})
        result = validate_patch_table(table, audit_definitions(sample_path))

        assert result.is_valid
        assert [(w.headword, w.message) for w in result.warnings] == [
            ("casa", "No audit finding for this headword; the rule may be stale"),
            ("horcón", "Audit finding has no patch rule"),
            ("taza", "Audit finding has no patch rule"),
        ]

    def test_suggest_patch_table(self, sample_path):
        issues = audit_definitions(sample_path) + audit_definition_markup(sample_path)
        table = suggest_patch_table(issues, description="draft")

        assert table.description == "draft"
        assert {h: [s.operation for s in steps] for h, steps in table.rules.items()} == {
            "pan": ["drop_dead_definitions", "inject_placeholder_gloss"],
            "horcón": ["inject_placeholder_gloss"],
            "taza": ["drop_empty_examples"],
            "checo": ["repair_cross_reference"],
        }
        assert validate_patch_table(table, issues).warning_count == 0

    def test_marked_pointer_needs_no_rule(self):
        """A bold pointer already marked with a plus sign needs no rule."""
        xml = (
            "<Lemma><Lemma.LemmaSign>guagua</Lemma.LemmaSign><Sense><Definition>"
            "<Definition.Definición><Bold>wawa +</Bold></Definition.Definición>"
            "</Definition></Sense></Lemma>"
        )
        issues = audit_definitions(xml) + audit_definition_markup(xml)
        draft = suggest_patch_table(issues)

        assert [(i.lemma, i.type) for i in issues] == [("guagua", IssueType.POINTER_ONLY)]
        assert len(draft) == 0
        assert validate_patch_table(draft, issues).warning_count == 0

    def test_rule_for_unrepairable_finding_is_not_stale(self):
        xml = (
            "<Lemma><Lemma.LemmaSign>guagua</Lemma.LemmaSign><Sense><Definition>"
            "<Definition.Definición><Bold>wawa +</Bold></Definition.Definición>"
            "</Definition></Sense></Lemma>"
        )
        table = load_patch_table({"patches": {"guagua": ["repair_cross_reference"]}})
        result = validate_patch_table(table, audit_definition_markup(xml))

        assert result.warning_count == 0

    def test_suggest_skips_subentry_glosses(self):
        issue = IntegrityIssue(
            lemma="dar", type=IssueType.DEAD_NODE, details="", has_subentries=True,
            subentry="dar largas",
        )
        assert len(suggest_patch_table([issue])) == 0


class TestExecutor:
    """Tests for applying a table to parsed lemmas."""

    def test_default_table_on_sample(self, sample_lemmas):
        patched, report = apply_patches_with_report(sample_lemmas)
        by_headword = {l.lemma_sign: l for l in patched}

        assert report.lemma_count == 9
        assert report.applied_count == 6
        assert report.changed_count == 5
        assert len(by_headword["pan"].senses[0].definitions) == 1
        assert by_headword["horcón"].senses[0].definitions[0].text == PLACEHOLDER_GLOSS
        assert by_headword["checo"].senses[0].definitions[0].text == "<b>checa +</b>"
        assert by_headword["chagra"].senses[0].definitions[0].utc == "U.t.c.adj."
        relocated = by_headword["llevar"].subentries[0].senses[0].definitions[0]
        assert relocated.examples[0].is_ad_hoc

    def test_unlisted_lemmas_untouched(self, sample_lemmas):
        patched = apply_patches(sample_lemmas)

        assert patched[0] is sample_lemmas[0]
        assert patched[1] is sample_lemmas[1]

    def test_input_not_mutated(self, sample_lemmas):
        horcon = sample_lemmas[4]
        apply_patches(sample_lemmas)
        assert horcon.senses[0].definitions[0].text == ""

    def test_idempotent(self, sample_lemmas):
        once = apply_patches(sample_lemmas)
        assert apply_patches(once) == once

    def test_headword_match_is_case_insensitive(self):
        lemma = _lemma(Definition(text=""), headword="  PAN ")
        table = load_patch_table({"patches": {"pan": ["inject_placeholder_gloss"]}})

        patched = apply_patches([lemma], table)
        assert patched[0].senses[0].definitions[0].text == PLACEHOLDER_GLOSS

    def test_invalid_table_raises(self, sample_lemmas):
        table = load_patch_table({"patches": {"pan": ["bake"]}})
        with pytest.raises(PatchTableError, match="Invalid patch table"):
            apply_patches(sample_lemmas, table)

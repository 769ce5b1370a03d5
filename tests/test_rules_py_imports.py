"""Tests for python.import-grouping."""
from __future__ import annotations

import dataclasses
from pathlib import Path
from types import MappingProxyType

from styleguard.constants import Language
from styleguard.diagnostics import Violation
from styleguard.engine import check_parsed
from styleguard.fixer import FixOutcome, fix_source
from styleguard.parser import ParseResult, parse_source
from styleguard.rules.registry import get_enabled_rules
from styleguard.types import (
    ImportGroupingOptions,
    RuleSettings,
    StyleGuardConfig,
    default_rule_settings,
)

RULE_ID: str = "python.import-grouping"


def _make_config(**options: tuple[str, ...]) -> StyleGuardConfig:
    rules: dict[str, RuleSettings] = default_rule_settings()
    rules[RULE_ID] = dataclasses.replace(
        rules[RULE_ID], options=ImportGroupingOptions(**options),
    )
    return StyleGuardConfig(rules=MappingProxyType(rules)).with_selection((RULE_ID,))


CONFIG: StyleGuardConfig = _make_config()


def _check(source: str, config: StyleGuardConfig = CONFIG) -> list[Violation]:
    parse_result: ParseResult = parse_source(
        file=Path("views.py"), source=source, language=Language.PYTHON,
    )
    report, _ = check_parsed(
        parse_result=parse_result, rules=get_enabled_rules(config=config), config=config,
    )
    return list(report)


def _fix(source: str, config: StyleGuardConfig = CONFIG) -> str:
    outcome: FixOutcome = fix_source(
        file=Path("views.py"),
        source=source,
        language=Language.PYTHON,
        rules=get_enabled_rules(config=config),
        config=config,
    )
    assert outcome.converged
    assert len(outcome.report) == 0
    return outcome.source


class TestGroupOrder:
    def test_stdlib_after_framework_flagged(self) -> None:
        violations: list[Violation] = _check(
            "from django.http import Http404\nimport json\n",
        )
        assert len(violations) == 1
        assert violations[0].message == (
            "Standard library import 'json' should come before framework imports"
        )
        assert violations[0].location.line == 2
        assert violations[0].fixable is True

    def test_canonical_layout_clean(self) -> None:
        source: str = (
            '"""Views."""\n'
            "from __future__ import annotations\n"
            "\n"
            "import json\n"
            "import os\n"
            "\n"
            "import requests\n"
            "\n"
            "from django.http import Http404\n"
            "\n"
            "from .models import Book\n"
            "\n"
            "try:\n"
            "    import ujson\n"
            "except ImportError:\n"
            "    ujson = None\n"
        )
        assert _check(source) == []

    def test_alphabetical_order_within_group(self) -> None:
        violations: list[Violation] = _check("import sys\nimport os\n")
        assert [v.message for v in violations] == [
            "Import 'os' is not alphabetized within standard library imports "
            "(should come before 'sys')"
        ]

    def test_plain_import_before_from_import(self) -> None:
        assert len(_check("from requests import get\nimport requests\n")) == 1

    def test_missing_blank_line_between_groups(self) -> None:
        violations: list[Violation] = _check("import os\nimport requests\n")
        assert [v.message for v in violations] == [
            "Missing blank line between standard library and third-party imports"
        ]

    def test_configured_local_and_framework_packages(self) -> None:
        config: StyleGuardConfig = _make_config(
            framework_packages=("django", "rest_framework"),
            local_packages=("shop",),
        )
        source: str = (
            "import requests\n"
            "\n"
            "from django.db import models\n"
            "from rest_framework import serializers\n"
            "\n"
            "from shop.models import Order\n"
        )
        assert _check(source, config) == []
        assert len(_check(source)) == 2

    def test_statements_after_the_block_ignored(self) -> None:
        source: str = "import os\n\nx = 1\n\nimport abc\n"
        assert _check(source) == []

    def test_no_imports(self) -> None:
        assert _check("x = 1\n") == []


class TestFix:
    def test_two_imports_swapped(self) -> None:
        assert _fix("from django.http import Http404\nimport json\n") == (
            "import json\n\nfrom django.http import Http404\n"
        )

    def test_full_regrouping(self) -> None:
        source: str = (
            "from .models import Book\n"
            "import requests\n"
            "from django.db import models\n"
            "import sys\n"
            "from __future__ import annotations\n"
            "try:\n"
            "    import ujson as json\n"
            "except ImportError:\n"
            "    import json\n"
            "import os\n"
            "\n"
            "\n"
            "def view():\n"
            "    pass\n"
        )
        expected: str = (
            "from __future__ import annotations\n"
            "\n"
            "import os\n"
            "import sys\n"
            "\n"
            "import requests\n"
            "\n"
            "from django.db import models\n"
            "\n"
            "from .models import Book\n"
            "\n"
            "try:\n"
            "    import ujson as json\n"
            "except ImportError:\n"
            "    import json\n"
            "\n"
            "\n"
            "def view():\n"
            "    pass\n"
        )
        assert _fix(source) == expected

    def test_comments_travel_with_the_next_import(self) -> None:
        source: str = (
            "import os\n"
            "# needed for the admin\n"
            "import django\n"
            "import json\n"
        )
        assert _fix(source) == (
            "import json\n"
            "import os\n"
            "\n"
            "# needed for the admin\n"
            "import django\n"
        )

    def test_docstring_stays_on_top(self) -> None:
        source: str = '"""Module doc."""\nimport sys\nimport os\n'
        assert _fix(source) == '"""Module doc."""\nimport os\nimport sys\n'

    def test_fix_is_idempotent(self) -> None:
        once: str = _fix("import requests\nimport os\nfrom . import utils\n")
        assert _fix(once) == once

    def test_shebang_stays_on_first_line(self) -> None:
        source: str = "#!/usr/bin/env python\nimport sys\nimport json\n"
        assert _fix(source) == "#!/usr/bin/env python\nimport json\nimport sys\n"

    def test_encoding_declaration_stays_on_top(self) -> None:
        source: str = (
            "#!/usr/bin/env python\n"
            "# -*- coding: utf-8 -*-\n"
            "# helpers\n"
            "import sys\n"
            "import os\n"
        )
        assert _fix(source) == (
            "#!/usr/bin/env python\n"
            "# -*- coding: utf-8 -*-\n"
            "import os\n"
            "# helpers\n"
            "import sys\n"
        )

    def test_encoding_declaration_on_first_line(self) -> None:
        source: str = "# vim: set fileencoding=utf-8 :\nimport sys\nimport os\n"
        assert _fix(source) == "# vim: set fileencoding=utf-8 :\nimport os\nimport sys\n"

    def test_crlf_line_endings_kept(self) -> None:
        source: str = "import django\r\nimport os\r\n"
        assert _fix(source) == "import os\r\n\r\nimport django\r\n"

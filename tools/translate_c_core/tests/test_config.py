from __future__ import annotations

import json
import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[3]
SRC_ROOT = REPO_ROOT / "tools" / "translate_c_core" / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from translate_c_core.common import ConfigError
from translate_c_core.config import load_replacement_policy, policy_from_dict
from translate_c_core.policy import ACTION_REPLACED, ACTION_UNRESOLVED, repair_translation


def compile_error(name: str, message: str = "unable to translate macro") -> str:
    return f'pub const {name} = @compileError("{message}");\n// demo.h:10:9\n'


class PolicyConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _write(self, payload: object) -> Path:
        path = self.root / "policy.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_defaults_from_empty_object(self) -> None:
        config = policy_from_dict({})
        policy = config.to_policy()

        self.assertTrue(policy.remove_underscore)
        self.assertTrue(policy.remove_benign_errors)
        self.assertEqual(policy.compile_error_replacements, {})
        self.assertEqual(config.param_names_prefix, "__fn_param_names_")
        self.assertIsNone(config.translate.timeout_seconds)

    def test_loads_full_config_from_file(self) -> None:
        path = self._write(
            {
                "remove_underscore": False,
                "remove_benign_errors": True,
                "compile_error_replacements": {"RL_MALLOC": "", "RL_COUNT": ["pub", "const", "RL_COUNT = 4;"]},
                "replacement_rules": [
                    {"pattern": "^RL_", "replacement": "// dropped\n"},
                    {"pattern": "undefined identifier", "replacement": "", "match": "message"},
                ],
                "param_names_prefix": "__params_",
                "translate": {
                    "include_dirs": ["include"],
                    "defines": ["PLATFORM_DESKTOP"],
                    "args": ["-target", "x86_64-linux-gnu"],
                    "timeout_seconds": 30,
                },
            }
        )

        config = load_replacement_policy(path)
        policy = config.to_policy()

        self.assertFalse(policy.remove_underscore)
        self.assertEqual(config.param_names_prefix, "__params_")
        self.assertEqual(config.translate.include_dirs, ("include",))
        self.assertEqual(config.translate.defines, ("PLATFORM_DESKTOP",))
        self.assertEqual(config.translate.args, ("-target", "x86_64-linux-gnu"))
        self.assertEqual(config.translate.timeout_seconds, 30.0)

        source = (
            compile_error("RL_MALLOC")
            + compile_error("RL_COUNT")
            + compile_error("RL_FREE")
            + compile_error("OTHER", message="undefined identifier `x`")
            + compile_error("_hidden")
        )
        result = repair_translation(source, policy)

        self.assertFalse(result.ok)
        self.assertEqual(list(result.unresolved_by_name), ["_hidden"])
        self.assertEqual(
            [item.replacement for item in result.resolutions[:4]],
            ["", "pub const RL_COUNT = 4;", "// dropped\n", ""],
        )
        self.assertEqual(result.resolutions[4].action, ACTION_UNRESOLVED)

    def test_cli_overrides_take_precedence(self) -> None:
        config = policy_from_dict({"compile_error_replacements": {"A": "from-file"}, "remove_benign_errors": False})
        policy = config.to_policy(extra_replacements={"A": "from-cli"}, remove_benign_errors=True)

        result = repair_translation(compile_error("A") + compile_error("va_arg"), policy)

        self.assertEqual(result.source, "from-cli")
        self.assertEqual(result.resolutions[0].action, ACTION_REPLACED)

    def test_schema_violations_are_reported_with_path(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            policy_from_dict({"remove_underscore": "yes"})
        self.assertIn("$.remove_underscore", str(ctx.exception))

        with self.assertRaises(ConfigError) as ctx:
            policy_from_dict({"replacement_rules": [{"pattern": "^X"}]})
        self.assertIn("$.replacement_rules[0]", str(ctx.exception))

        with self.assertRaises(ConfigError):
            policy_from_dict({"unknown_option": True})

    def test_invalid_rule_regex(self) -> None:
        with self.assertRaises(ConfigError) as ctx:
            policy_from_dict({"replacement_rules": [{"pattern": "(", "replacement": ""}]})
        self.assertIn("replacement_rules[0].pattern", str(ctx.exception))

    def test_invalid_json_and_non_object_root(self) -> None:
        path = self.root / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(ConfigError):
            load_replacement_policy(path)

        with self.assertRaises(ConfigError):
            load_replacement_policy(self._write(["not", "an", "object"]))


if __name__ == "__main__":
    unittest.main()

"""Starter .styleaudit.toml template."""

DEFAULT_TOML = """\
# styleaudit configuration
version = "1.0"

[audit]
# include = ["app/**", "components/**", "styles/**"]
# exclude = ["**/*.stories.tsx"]
since = "HEAD~1"                          # comparison ref for --changed
fail_on = "error"                         # error | warn | info
format = "pretty"                         # pretty | json | junit
baseline = "styleaudit.baseline.json"
output = "reports/styleaudit.json"
# skip_tools = ["stylelint"]

[index]
# import prefixes resolved against the repo root
aliases = { "@/" = "" }

[tools.css-size]
# bundle_glob = ".next/static/css/**/*.css"
# max_total_kb = 250

[tools.css-unused-classes]
# ignore_class_name_patterns = ["is-*"]
# ignore_files = []

[tools.css-best-practices]
# allow_global_in = ["styles/"]
# allow_legacy_directory = false
"""

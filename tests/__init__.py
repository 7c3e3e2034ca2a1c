"""fluentkit test suite.

Folder taxonomy
- unit/         : Pure, fast checks of a single module, class or function.
- integration/  : Checks that write real files (directory cleanup, barcode files).

General guidance
- Pass explicit locales; the default locale depends on the environment.
- DNS is monkeypatched in unit tests; real lookups are marked `network`
  and deselected by default.
- Property-based tests live with the module they exercise and use @pytest.mark.property.
"""

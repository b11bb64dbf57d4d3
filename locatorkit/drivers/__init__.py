"""
Native finders the element locator can run against.

Import submodules directly so the browser driver (Playwright) is only
loaded when it is used:
  from locatorkit.drivers.document import HtmlDocument
  from locatorkit.drivers.browser import BrowserScope
"""

__all__: list[str] = []

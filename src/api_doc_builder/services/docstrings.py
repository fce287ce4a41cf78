"""Documentation comments of handlers.

A handler's docstring plays the role of its source documentation comment:
the body becomes the operation description, its first sentence the summary
and the ``:returns:`` text the success response description.
"""

import inspect
import re

from api_doc_builder.models.route import HandlerMethod

_FIELD = re.compile(r"^\s*:(param|type|raises|returns?|rtype)\b", re.IGNORECASE)
_RETURNS_FIELD = re.compile(r"^\s*:returns?:\s*(.*)$", re.IGNORECASE)
_SECTION = re.compile(r"^\s*(Args|Arguments|Parameters|Raises|Returns|Yields|Examples?):\s*$")
_FIRST_SENTENCE = re.compile(r"^(.*?[.!?])(?:\s|$)", re.DOTALL)


class DocstringProvider:
    def get_method_description(self, handler: HandlerMethod) -> str:
        lines = []
        for line in inspect.cleandoc(handler.doc_comment or "").splitlines():
            if _FIELD.match(line) or _SECTION.match(line):
                break
            lines.append(line)
        return "\n".join(lines).strip()

    def get_method_return(self, handler: HandlerMethod) -> str:
        lines = inspect.cleandoc(handler.doc_comment or "").splitlines()
        for index, line in enumerate(lines):
            field = _RETURNS_FIELD.match(line)
            if field:
                return field.group(1).strip()
            if _SECTION.match(line) and line.strip().startswith("Returns"):
                section = []
                for following in lines[index + 1:]:
                    if not following.strip() or _SECTION.match(following):
                        break
                    section.append(following.strip())
                return " ".join(section)
        return ""

    def get_first_sentence(self, text: str | None) -> str:
        if not text:
            return ""
        paragraph = text.strip().split("\n\n", 1)[0]
        match = _FIRST_SENTENCE.match(paragraph)
        sentence = match.group(1) if match else paragraph
        return " ".join(sentence.split())

import logging
from typing import Any, Dict, List, Optional, Tuple

from aipcheck.spec import (
    EnumDef,
    EnumValue,
    Field,
    FieldBehavior,
    HttpRule,
    Message,
    Method,
    OperationInfo,
    Option,
    ProtoFile,
    Service,
    SourceLocation,
    freeze_value,
)
from .errors import ParseError
from .lexer import Token, TokenKind, tokenize

log = logging.getLogger(__name__)

FIELD_BEHAVIOR_OPTION = "(google.api.field_behavior)"
RESOURCE_REFERENCE_OPTION = "(google.api.resource_reference)"
RESOURCE_OPTION = "(google.api.resource)"
HTTP_OPTION = "(google.api.http)"
OPERATION_INFO_OPTION = "(google.longrunning.operation_info)"

HTTP_VERBS = ("get", "put", "post", "delete", "patch")
FIELD_LABELS = ("repeated", "optional", "required")


def _parse_int(text: str) -> int:
    if text.lower().startswith("0x"):
        return int(text, 16)
    if len(text) > 1 and text.startswith("0"):
        return int(text, 8)
    return int(text)


def _option_value(options, name: str) -> Optional[Dict[str, Any]]:
    """Collects an option set either as one aggregate or field by field.

    ``option (google.api.http) = { post: "/v1/books" };`` and
    ``option (google.api.http).post = "/v1/books";`` produce the same mapping.
    Returns None when the option is absent.
    """
    merged: Dict[str, Any] = {}
    found = False
    prefix = name + "."
    for option in options:
        if option.name == name and hasattr(option.value, "get"):
            merged.update(option.value)
            found = True
        elif option.name.startswith(prefix):
            *parents, key = option.name[len(prefix) :].split(".")
            target = merged
            for part in parents:
                nested = target.get(part)
                if not isinstance(nested, dict):
                    nested = dict(nested) if hasattr(nested, "get") else {}
                    target[part] = nested
                target = nested
            target[key] = option.value
            found = True
    return merged if found else None


def _merge_entry(target: Dict[str, Any], key: str, value: Any) -> None:
    # Repeated keys in text format aggregate into a list.
    if key not in target:
        target[key] = value
    elif isinstance(target[key], list):
        target[key].append(value)
    else:
        target[key] = [target[key], value]


class ProtoParser:
    def __init__(self, text: str, path: str):
        self.path = path
        self.tokens = tokenize(text, path)
        self.index = 0
        self.package = ""

    # --- Token helpers ---

    def _peek(self, offset: int = 0) -> Token:
        index = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _next(self) -> Token:
        token = self._peek()
        if token.kind != TokenKind.EOF:
            self.index += 1
        return token

    def _error(self, message: str, token: Optional[Token] = None) -> ParseError:
        token = token or self._peek()
        return ParseError(self.path, token.line, token.column, message)

    def _at(self, value: str, offset: int = 0) -> bool:
        token = self._peek(offset)
        return (
            token.kind in (TokenKind.SYMBOL, TokenKind.IDENT) and token.value == value
        )

    def _accept(self, value: str) -> bool:
        if self._at(value):
            self.index += 1
            return True
        return False

    def _expect(self, value: str) -> Token:
        token = self._peek()
        if not self._at(value):
            found = token.value or "end of file"
            raise self._error(f"Expected '{value}' but found '{found}'", token)
        return self._next()

    def _ident(self) -> Token:
        token = self._peek()
        if token.kind != TokenKind.IDENT:
            found = token.value or "end of file"
            raise self._error(f"Expected identifier but found '{found}'", token)
        return self._next()

    def _full_ident(self) -> str:
        parts = []
        if self._accept("."):
            parts.append("")
        parts.append(self._ident().value)
        while self._at(".") and self._peek(1).kind == TokenKind.IDENT:
            self._next()
            parts.append(self._ident().value)
        return ".".join(parts)

    def _int(self) -> int:
        negative = self._accept("-")
        token = self._peek()
        if token.kind != TokenKind.INT:
            raise self._error(f"Expected integer but found '{token.value}'", token)
        self._next()
        value = self._int_value(token)
        return -value if negative else value

    def _int_value(self, token: Token) -> int:
        try:
            return _parse_int(token.value)
        except ValueError:
            message = f"Invalid integer literal '{token.value}'"
            raise self._error(message, token) from None

    def _string(self) -> str:
        token = self._peek()
        if token.kind != TokenKind.STRING:
            raise self._error(f"Expected string but found '{token.value}'", token)
        chunks = []
        while self._peek().kind == TokenKind.STRING:
            chunks.append(self._next().value)
        return "".join(chunks)

    def _location(self, token: Token) -> SourceLocation:
        return SourceLocation(self.path, token.line, token.column)

    def _skip_statement(self) -> None:
        # Skips to the terminating ';' of statements whose content is unused.
        while not self._at(";"):
            if self._peek().kind == TokenKind.EOF:
                raise self._error("Unexpected end of file")
            self._next()
        self._next()

    def _skip_block(self) -> None:
        self._expect("{")
        depth = 1
        while depth:
            token = self._next()
            if token.kind == TokenKind.EOF:
                raise self._error("Unexpected end of file inside block", token)
            if token.kind == TokenKind.SYMBOL and token.value == "{":
                depth += 1
            elif token.kind == TokenKind.SYMBOL and token.value == "}":
                depth -= 1

    # --- Constants and options ---

    def _constant(self) -> Any:
        token = self._peek()
        if token.kind == TokenKind.STRING:
            return self._string()
        if self._at("{") or self._at("<"):
            return self._aggregate()
        if self._at("["):
            return self._list_value()
        sign = ""
        if self._at("-") or self._at("+"):
            sign = self._next().value
            token = self._peek()
        if token.kind == TokenKind.INT:
            self._next()
            value = self._int_value(token)
            return -value if sign == "-" else value
        if token.kind == TokenKind.FLOAT:
            self._next()
            value = float(token.value.rstrip("fF"))
            return -value if sign == "-" else value
        if token.kind == TokenKind.IDENT:
            name = self._full_ident()
            if name == "true":
                return True
            if name == "false":
                return False
            if name in ("inf", "nan"):
                value = float(name)
                return -value if sign == "-" else value
            return name
        raise self._error(f"Expected a constant but found '{token.value}'", token)

    def _list_value(self) -> List[Any]:
        self._expect("[")
        items: List[Any] = []
        while not self._accept("]"):
            items.append(self._constant())
            if not self._accept(","):
                self._expect("]")
                break
        return items

    def _aggregate(self) -> Dict[str, Any]:
        close = "}" if self._next().value == "{" else ">"
        result: Dict[str, Any] = {}
        while not self._accept(close):
            if self._peek().kind == TokenKind.EOF:
                raise self._error("Unterminated option value")
            if self._accept("["):
                key = f"[{self._full_ident()}]"
                self._expect("]")
            else:
                key = self._ident().value
            if self._accept(":"):
                value = self._constant()
            elif self._at("{") or self._at("<"):
                value = self._aggregate()
            else:
                raise self._error(f"Expected ':' after '{key}'")
            _merge_entry(result, key, value)
            if not self._accept(","):
                self._accept(";")
        return result

    def _option_name(self) -> str:
        if self._accept("("):
            name = f"({self._full_ident()})"
            self._expect(")")
        else:
            name = self._ident().value
        while self._accept("."):
            name += "." + self._ident().value
        return name

    def _option_body(self) -> Option:
        token = self._peek()
        name = self._option_name()
        self._expect("=")
        value = freeze_value(self._constant())
        return Option(name=name, value=value, location=self._location(token))

    def _option_statement(self) -> Option:
        self._expect("option")
        option = self._option_body()
        self._expect(";")
        return option

    def _bracket_options(self) -> Tuple[Option, ...]:
        options: List[Option] = []
        if self._accept("["):
            options.append(self._option_body())
            while self._accept(","):
                options.append(self._option_body())
            self._expect("]")
        return tuple(options)

    # --- Top level ---

    def parse(self) -> ProtoFile:
        syntax = "proto2"
        imports: List[str] = []
        options: List[Option] = []
        messages: List[Message] = []
        enums: List[EnumDef] = []
        services: List[Service] = []

        while self._peek().kind != TokenKind.EOF:
            token = self._peek()
            if self._accept(";"):
                continue
            if self._accept("syntax"):
                self._expect("=")
                syntax = self._string()
                self._expect(";")
            elif self._accept("edition"):
                self._expect("=")
                syntax = f"edition-{self._string()}"
                self._expect(";")
            elif self._accept("package"):
                self.package = self._full_ident()
                self._expect(";")
            elif self._accept("import"):
                if self._at("public") or self._at("weak"):
                    self._next()
                imports.append(self._string())
                self._expect(";")
            elif self._at("option"):
                options.append(self._option_statement())
            elif self._at("message"):
                messages.append(self._message(self.package))
            elif self._at("enum"):
                enums.append(self._enum(self.package))
            elif self._at("service"):
                services.append(self._service())
            elif self._accept("extend"):
                self._full_ident()
                self._skip_block()
            else:
                raise self._error(
                    f"Unexpected token '{token.value}' at top level", token
                )

        log.debug(
            f"Parsed {self.path}: {len(messages)} messages, {len(services)} services"
        )
        return ProtoFile(
            path=self.path,
            syntax=syntax,
            package=self.package,
            imports=tuple(imports),
            options=tuple(options),
            messages=tuple(messages),
            enums=tuple(enums),
            services=tuple(services),
        )

    # --- Messages ---

    def _message(self, scope: str) -> Message:
        start = self._expect("message")
        name = self._ident().value
        return self._message_body(start, name, scope)

    def _message_body(self, start: Token, name: str, scope: str) -> Message:
        full_name = f"{scope}.{name}" if scope else name
        fields: List[Field] = []
        nested: List[Message] = []
        enums: List[EnumDef] = []
        options: List[Option] = []

        self._expect("{")
        while not self._accept("}"):
            token = self._peek()
            if token.kind == TokenKind.EOF:
                raise self._error(f"Unterminated message '{name}'", start)
            if self._accept(";"):
                continue
            if self._at("option") and not self._at("=", 1):
                options.append(self._option_statement())
            elif self._at("message") and self._peek(1).kind == TokenKind.IDENT:
                nested.append(self._message(full_name))
            elif self._at("enum") and self._peek(1).kind == TokenKind.IDENT:
                enums.append(self._enum(full_name))
            elif self._at("oneof") and self._at("{", 2):
                fields.extend(self._oneof(full_name, nested))
            elif self._at("map") and self._at("<", 1):
                fields.append(self._map_field())
            elif (self._at("reserved") or self._at("extensions")) and not self._at(
                "=", 2
            ):
                self._skip_statement()
            elif self._at("extend") and self._peek(1).kind == TokenKind.IDENT:
                self._next()
                self._full_ident()
                self._skip_block()
            else:
                field, group = self._field(full_name)
                fields.append(field)
                if group is not None:
                    nested.append(group)

        message_options = tuple(options)
        resource = _option_value(message_options, RESOURCE_OPTION)
        resource_type = resource.get("type") if resource else None

        return Message(
            name=name,
            full_name=full_name,
            location=self._location(start),
            fields=tuple(fields),
            messages=tuple(nested),
            enums=tuple(enums),
            options=message_options,
            resource_type=resource_type,
            comment=start.comment,
        )

    def _oneof(self, scope: str, nested: List[Message]) -> List[Field]:
        self._expect("oneof")
        self._ident()
        fields: List[Field] = []
        self._expect("{")
        while not self._accept("}"):
            if self._peek().kind == TokenKind.EOF:
                raise self._error("Unterminated oneof")
            if self._accept(";"):
                continue
            if self._at("option") and not self._at("=", 1):
                self._option_statement()
                continue
            field, group = self._field(scope)
            fields.append(field)
            if group is not None:
                nested.append(group)
        return fields

    def _map_field(self) -> Field:
        start = self._expect("map")
        self._expect("<")
        key_type = self._full_ident()
        self._expect(",")
        value_type = self._full_ident()
        self._expect(">")
        name = self._ident().value
        self._expect("=")
        number = self._int()
        options = self._bracket_options()
        self._expect(";")
        return self._build_field(
            start, name, f"map<{key_type}, {value_type}>", number, "map", options
        )

    def _field(self, scope: str) -> Tuple[Field, Optional[Message]]:
        start = self._peek()
        label = ""
        if start.value in FIELD_LABELS and not self._at("=", 2):
            label = self._next().value

        if self._at("group") and self._peek(1).kind == TokenKind.IDENT:
            group_token = self._next()
            name = self._ident().value
            self._expect("=")
            number = self._int()
            options = self._bracket_options()
            group = self._message_body(group_token, name, scope)
            field = self._build_field(start, name.lower(), name, number, label, options)
            return field, group

        type_name = self._full_ident()
        name = self._ident().value
        self._expect("=")
        number = self._int()
        options = self._bracket_options()
        self._expect(";")
        return self._build_field(start, name, type_name, number, label, options), None

    def _build_field(
        self,
        start: Token,
        name: str,
        type_name: str,
        number: int,
        label: str,
        options: Tuple[Option, ...],
    ) -> Field:
        behaviors: List[FieldBehavior] = []
        resource_reference = None
        for option in options:
            if option.name == FIELD_BEHAVIOR_OPTION:
                values = option.value
                if not isinstance(values, tuple):
                    values = (values,)
                for value in values:
                    try:
                        behavior = FieldBehavior(str(value))
                    except ValueError:
                        log.debug(f"Unknown field behavior '{value}' on {name}")
                        continue
                    if behavior not in behaviors:
                        behaviors.append(behavior)
        ref = _option_value(options, RESOURCE_REFERENCE_OPTION)
        if ref:
            resource_reference = ref.get("type") or ref.get("child_type")

        return Field(
            name=name,
            type=type_name,
            number=number,
            location=self._location(start),
            label=label,
            behaviors=tuple(behaviors),
            resource_reference=resource_reference,
            options=options,
            comment=start.comment,
        )

    # --- Enums ---

    def _enum(self, scope: str) -> EnumDef:
        start = self._expect("enum")
        name = self._ident().value
        values: List[EnumValue] = []
        options: List[Option] = []
        self._expect("{")
        while not self._accept("}"):
            token = self._peek()
            if token.kind == TokenKind.EOF:
                raise self._error(f"Unterminated enum '{name}'", start)
            if self._accept(";"):
                continue
            if self._at("option") and not self._at("=", 1):
                options.append(self._option_statement())
            elif self._at("reserved") and not self._at("=", 1):
                self._skip_statement()
            else:
                value_name = self._ident().value
                self._expect("=")
                number = self._int()
                self._bracket_options()
                self._expect(";")
                values.append(EnumValue(value_name, number, self._location(token)))
        return EnumDef(
            name=name,
            full_name=f"{scope}.{name}" if scope else name,
            location=self._location(start),
            values=tuple(values),
            options=tuple(options),
        )

    # --- Services ---

    def _service(self) -> Service:
        start = self._expect("service")
        name = self._ident().value
        full_name = f"{self.package}.{name}" if self.package else name
        methods: List[Method] = []
        options: List[Option] = []
        self._expect("{")
        while not self._accept("}"):
            if self._peek().kind == TokenKind.EOF:
                raise self._error(f"Unterminated service '{name}'", start)
            if self._accept(";"):
                continue
            if self._at("option"):
                options.append(self._option_statement())
            elif self._at("rpc"):
                methods.append(self._rpc(name))
            else:
                token = self._peek()
                raise self._error(f"Unexpected token '{token.value}' in service", token)
        return Service(
            name=name,
            full_name=full_name,
            location=self._location(start),
            methods=tuple(methods),
            options=tuple(options),
            comment=start.comment,
        )

    def _rpc_type(self) -> Tuple[str, bool]:
        self._expect("(")
        streaming = False
        if self._at("stream") and not self._at(")", 1):
            self._next()
            streaming = True
        type_name = self._full_ident()
        self._expect(")")
        return type_name, streaming

    def _rpc(self, service: str) -> Method:
        start = self._expect("rpc")
        name = self._ident().value
        request_type, client_streaming = self._rpc_type()
        self._expect("returns")
        response_type, server_streaming = self._rpc_type()

        options: List[Option] = []
        if self._accept("{"):
            while not self._accept("}"):
                if self._peek().kind == TokenKind.EOF:
                    raise self._error(f"Unterminated rpc '{name}'", start)
                if self._accept(";"):
                    continue
                options.append(self._option_statement())
        else:
            self._expect(";")

        http_value = _option_value(options, HTTP_OPTION)
        http = _http_rule(http_value) if http_value else None
        operation_info = None
        info = _option_value(options, OPERATION_INFO_OPTION)
        if info:
            operation_info = OperationInfo(
                response_type=str(info.get("response_type", "")),
                metadata_type=str(info.get("metadata_type", "")),
            )

        return Method(
            name=name,
            request_type=request_type,
            response_type=response_type,
            location=self._location(start),
            service=service,
            package=self.package,
            client_streaming=client_streaming,
            server_streaming=server_streaming,
            http=http,
            operation_info=operation_info,
            options=tuple(options),
            comment=start.comment,
        )


def _http_rule(value: Any) -> Optional[HttpRule]:
    body = value.get("body")
    for verb in HTTP_VERBS:
        if verb in value:
            return HttpRule(verb=verb, path=str(value[verb]), body=body)
    custom = value.get("custom")
    if hasattr(custom, "get"):
        return HttpRule(
            verb=str(custom.get("kind", "")),
            path=str(custom.get("path", "")),
            body=body,
        )
    return None


def parse_proto(text: str, path: str = "<string>") -> ProtoFile:
    """Parses proto source text. Raises ParseError naming the offending line."""
    return ProtoParser(text, path).parse()

"""Use Case: build the Knative adapter declarations for a classified handler."""

from lambda2knative.domain.config import MigrationConfig
from lambda2knative.domain.constants import (
    BODY_VAR,
    CTX_PARAM,
    ERR_VAR,
    ERROR_LOG_FORMAT,
    ERROR_STATUS,
    RECEIVER_NAME,
    REQUEST_PARAM,
    RESULT_VAR,
    WRITER_PARAM,
)
from lambda2knative.domain.entities import (
    AdapterDeclarationSet,
    HandlerReference,
    ImportAliases,
    SignatureModel,
)
from lambda2knative.domain.go_ast import (
    AssignStmt,
    BasicLit,
    BinaryExpr,
    BlockStmt,
    CallExpr,
    CompositeLit,
    ExprStmt,
    Field,
    FuncDecl,
    FuncType,
    Ident,
    IfStmt,
    Node,
    ReturnStmt,
    SelectorExpr,
    StarExpr,
    StructType,
    TypeDecl,
    UnaryExpr,
    qualified,
    selector,
)


class AdapterSynthesizer:
    """Builds ``type Handler struct{}``, ``New()`` and ``(*Handler).Handle``."""

    def __init__(self, config: MigrationConfig) -> None:
        self.config = config

    def synthesize(
        self,
        handler: HandlerReference,
        signature: SignatureModel,
        aliases: ImportAliases,
    ) -> AdapterDeclarationSet:
        return AdapterDeclarationSet(
            adapter_type=self.adapter_type(),
            constructor=self.constructor(),
            dispatch_method=self.dispatch_method(handler, signature, aliases),
        )

    def adapter_type(self) -> TypeDecl:
        return TypeDecl(name=self.config.adapter_type, type=StructType())

    def constructor(self) -> FuncDecl:
        adapter = Ident(self.config.adapter_type)
        return FuncDecl(
            name=self.config.constructor,
            type=FuncType(results=(Field(type=StarExpr(adapter)),)),
            body=BlockStmt(stmts=(
                ReturnStmt(results=(UnaryExpr(op="&", x=CompositeLit(type=adapter)),)),
            )),
        )

    def dispatch_method(
        self,
        handler: HandlerReference,
        signature: SignatureModel,
        aliases: ImportAliases,
    ) -> FuncDecl:
        params = (
            Field(names=(CTX_PARAM,), type=selector(aliases.context, self.config.context_type)),
            Field(names=(WRITER_PARAM,), type=selector(aliases.http, "ResponseWriter")),
            Field(names=(REQUEST_PARAM,), type=StarExpr(selector(aliases.http, "Request"))),
        )
        return FuncDecl(
            name=self.config.dispatch_method,
            recv=Field(names=(RECEIVER_NAME,), type=StarExpr(Ident(self.config.adapter_type))),
            type=FuncType(params=params),
            body=BlockStmt(stmts=tuple(self.dispatch_body(handler, signature, aliases))),
        )

    def dispatch_body(
        self,
        handler: HandlerReference,
        signature: SignatureModel,
        aliases: ImportAliases,
    ) -> list[Node]:
        stmts: list[Node] = []

        # body, _ := io.ReadAll(r.Body): read errors are discarded
        if signature.has_input:
            stmts.append(AssignStmt(
                lhs=(Ident(BODY_VAR), Ident("_")),
                tok=":=",
                rhs=(CallExpr(
                    fun=selector(aliases.io, "ReadAll"),
                    args=(selector(REQUEST_PARAM, "Body"),),
                ),),
            ))

        stmts.append(self.handler_call(handler, signature))

        if signature.has_error:
            stmts.append(IfStmt(
                cond=BinaryExpr(x=Ident(ERR_VAR), op="!=", y=Ident("nil")),
                body=BlockStmt(stmts=(
                    ExprStmt(CallExpr(
                        fun=selector(aliases.log, "Printf"),
                        args=(BasicLit("STRING", ERROR_LOG_FORMAT), Ident(ERR_VAR)),
                    )),
                    ExprStmt(CallExpr(
                        fun=selector(WRITER_PARAM, "WriteHeader"),
                        args=(BasicLit("INT", ERROR_STATUS),),
                    )),
                    ReturnStmt(),
                )),
            ))

        if signature.has_output:
            encoder = CallExpr(fun=selector(aliases.json, "NewEncoder"), args=(Ident(WRITER_PARAM),))
            stmts.append(ExprStmt(CallExpr(
                fun=SelectorExpr(x=encoder, sel="Encode"),
                args=(Ident(RESULT_VAR),),
            )))
        return stmts

    @staticmethod
    def call_arguments(signature: SignatureModel) -> tuple[Node, ...]:
        """``ctx`` first when the handler takes a context, then the request body."""
        args: list[Node] = []
        if signature.has_context:
            args.append(Ident(CTX_PARAM))
        if signature.has_input:
            args.append(Ident(BODY_VAR))
        return tuple(args)

    @staticmethod
    def result_bindings(signature: SignatureModel) -> tuple[Node, ...]:
        names: list[str] = []
        if signature.has_output:
            names.append(RESULT_VAR)
        if signature.has_error:
            names.append(ERR_VAR)
        return tuple(Ident(name) for name in names)

    def handler_call(self, handler: HandlerReference, signature: SignatureModel) -> Node:
        call = CallExpr(fun=qualified(handler.qualified_name), args=self.call_arguments(signature))
        bindings = self.result_bindings(signature)
        if not bindings:
            return ExprStmt(call)
        return AssignStmt(lhs=bindings, tok=":=", rhs=(call,))

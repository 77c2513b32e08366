from ostrich.ostrich_chain import Chain, new
from ostrich.ostrich_datatypes import (
    CallableLink, IncompleteChain, LinkSignature, Quoted, VarArgs, link_signature
)
from ostrich.ostrich_evaluator import BuildResult, Evaluator
from ostrich.ostrich_runtime import ChainHost, ChainRunner, StdLib, ostrich_api_method

__all__ = [
    "BuildResult",
    "CallableLink",
    "Chain",
    "ChainHost",
    "ChainRunner",
    "Evaluator",
    "IncompleteChain",
    "LinkSignature",
    "Quoted",
    "StdLib",
    "VarArgs",
    "link_signature",
    "new",
    "ostrich_api_method",
]

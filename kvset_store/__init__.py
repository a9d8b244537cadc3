from .codec      import decode, encode
from .sorted_set import ValueSet
from .store      import KVSetStore, finalize, initialize
__all__ = ["KVSetStore", "ValueSet", "decode", "encode", "finalize", "initialize"]

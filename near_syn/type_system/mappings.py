"""
Type mappings for Rust to TypeScript.

This module contains the lookup tables used by the TypeTranslator: scalar
types, the generic containers it understands, and the NEAR JSON types that
are declared in the bindings prelude.
"""


# =============================================================================
# TYPE MAPPING CONSTANTS
# =============================================================================

# Base Rust to TypeScript type mapping
RUST_TO_TS_MAP = {
    # Boolean
    'bool': 'boolean',
    # Integers that fit in a JS number
    'u8': 'number',
    'u16': 'number',
    'u32': 'number',
    'i8': 'number',
    'i16': 'number',
    'i32': 'number',
    'usize': 'number',
    'isize': 'number',
    # Floats
    'f32': 'number',
    'f64': 'number',
    # Integers beyond 2^53 are serialized as strings
    'u64': 'string',
    'i64': 'string',
    'u128': 'string',
    'i128': 'string',
    # Text
    'String': 'string',
    'str': 'string',
    'char': 'string',
}

# Option<T> -> T|null
OPTION_TYPES = {'Option'}

# Sequence-like containers -> T[]
SEQUENCE_TYPES = {
    'Vec',
    'VecDeque',
    'LinkedList',
    'HashSet',
    'BTreeSet',
    'IndexSet',
}

# Map-like containers -> Record<K, V>
MAP_TYPES = {
    'HashMap',
    'BTreeMap',
    'IndexMap',
}

# Single-argument wrappers that serialize as their content -> T
TRANSPARENT_TYPES = {
    'Box',
    'Rc',
    'Arc',
    'Cow',
    'PromiseOrValue',
}

# Result<T, E> -> T (the error side is not serialized on success)
RESULT_TYPES = {'Result'}

# Types that denote "no value" in return position
VOID_RETURN_TYPES = {'Self'}

# NEAR JSON types emitted by `export type X = string;` in the bindings prelude
NEAR_PRELUDE_TYPES = (
    'U64',
    'I64',
    'U128',
    'I128',
    'AccountId',
    'ValidAccountId',
    'Base64VecU8',
)

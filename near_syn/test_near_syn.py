#!/usr/bin/env python3
"""
Unit tests for near-syn.

Run with: python3 -m pytest near_syn/test_near_syn.py
   or: python3 near_syn/test_near_syn.py
"""

import sys
import os
# Add parent directory to path so the package imports when run as a script
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from near_syn import __version__, __repository__
from near_syn.lexer import Lexer, TokenType
from near_syn.parser import (
    Parser,
    EnumDefinition,
    FunctionDefinition,
    ImplDefinition,
    ModuleDefinition,
    OtherItem,
    PathType,
    RawType,
    ReferenceType,
    StructDefinition,
    TraitDefinition,
    TupleType,
    TypeAlias,
)
from near_syn.type_system import TypeTranslator
from near_syn.contract import (
    AttributeClassifier,
    DocExtractor,
    InterfaceResolver,
    MethodRole,
    ReceiverKind,
    TraitRegistry,
    derives,
    has_attr,
    receiver_kind,
)
from near_syn.codegen import Diagnostics
from near_syn.nearsyn import NearSyn, format_now, main
from near_syn.settings import Settings, load_settings
from near_syn.errors import NearSynError


def parse(source):
    return Parser(Lexer(source).tokenize()).parse()


def parse_type(text):
    return Parser(Lexer(text).tokenize()).parse_type()


def attrs_of(source):
    """Parse `source` as the attributes of a unit struct."""
    return parse(source + '\nstruct S;').items[0].attrs


INPUT1 = '''
type AType = i32;

/// Doc-comments for a type def
type BType = i32;

/// Doc-comment line 1 for A
/// Doc-comment line 2 for A
/// Doc-comment line 3 for A
#[derive(Serialize)]
struct A {
    // No doc-comment for this field
    a1_field: U64,
    a2_field: U64,

    /// Line for a3
    /// Line for a2, then blank line
    ///
    /// Some markdown
    /// ```
    /// const a = [];
    /// const b = "";
    /// ```
    a3_field: U128,
}

// No doc-comment for this struct
#[derive(Serialize)]
struct B {
    b: U64,
}

/// non-serde enums are not exported
enum E0 {
    V1,
    V2,
}

/// doc-comment for enum
#[derive(Serialize)]
enum E {
    V1,
    V2,
}

#[near_bindgen]
struct C {
    f128: U128,
}

#[near_bindgen]
impl C {
    /// init func
    #[init]
    pub fn init_here(f128: U128) -> Self {
        Self { f128 }
    }

    /// Line 1 for get_f128 first
    /// Line 2 for get_f128 second
    pub fn get_f128(&self) -> U128 {
        self.f128
    }

    // Regular comments are not transpiled
    /// Set f128.
    pub fn set_f128(&mut self, value: U128) {
        self.f128 = value;
    }

    pub fn get_f128_other_way(&self, key: U128) -> U128 {
        self.f128 + key
    }

    pub fn more_types(&mut self, key: U128, tuple: (String, BTreeSet<i32>)) -> () {
        self.f128 = key;
    }

    /// Pay to set f128.
    #[payable]
    pub fn set_f128_with_sum(&mut self, a_value: U128, other_value: U128) {
        self.f128 = a_value + other_value;
    }

    #[private]
    pub fn marked_as_private(&mut self) {}

    fn private_method_not_exported(&self, value: U128) -> U128 {
        self.f128
    }

    fn private_mut_method_not_exported(&mut self, value: U128) {
        self.f128 = value;
    }
}

#[near_bindgen]
impl C {
    /// another impl
    pub fn another_impl(&self, f128: U128) -> U128 {
        f128
    }
}

// All methods for traits are public, and thus exported
#[near_bindgen]
impl I for C {
    /// Single-line comment for get
    fn get(&self) -> U128 {
        self.f128
    }
}

// Omitted since near-bindgen is not present, methods not exported
impl J for C {
    fn m() {}
}

// Omitted since even near-bindgen is present, methods are private
#[near_bindgen]
impl K for C {
    #[private]
    fn p() {}
}

mod inner_mod {
    type A_in_mod = u32;
}
'''

COUNTER = '''
//! A simple counter.

#[near_bindgen]
struct Counter {
    value: u64,
}

#[near_bindgen]
impl Counter {
    /// Returns the value.
    pub fn get(&self) -> u64 {
        self.value
    }

    #[payable]
    pub fn add(&mut self, by: Option<u32>) {}
}
'''


class TestLexer(unittest.TestCase):
    """Test tokenization of Rust source."""

    def types_of(self, source):
        return [t.type for t in Lexer(source).tokenize()]

    def test_keywords_and_punctuation(self):
        """Test that a method header tokenizes into keywords and punctuation."""
        self.assertEqual(
            self.types_of('pub fn f(&mut self) -> Vec<u8>;'),
            [TokenType.PUB, TokenType.FN, TokenType.IDENTIFIER, TokenType.LPAREN,
             TokenType.AMPERSAND, TokenType.MUT, TokenType.SELF_VALUE, TokenType.RPAREN,
             TokenType.ARROW, TokenType.IDENTIFIER, TokenType.LT, TokenType.IDENTIFIER,
             TokenType.GT, TokenType.SEMICOLON, TokenType.EOF],
        )

    def test_nested_generics_close_separately(self):
        """Test that `>>` closes two generic lists."""
        types = self.types_of('Vec<Vec<u8>>')
        self.assertEqual(types.count(TokenType.GT), 2)

    def test_lifetime_versus_char(self):
        """Test that 'a is a lifetime and 'a' is a char literal."""
        tokens = Lexer("&'a str; 'a'; '\\''").tokenize()
        self.assertEqual(tokens[1].type, TokenType.LIFETIME)
        self.assertEqual(tokens[1].value, "'a")
        self.assertEqual(tokens[4].type, TokenType.CHAR_LITERAL)
        self.assertEqual(tokens[6].type, TokenType.CHAR_LITERAL)

    def test_doc_comments(self):
        """Test that doc comments become tokens and regular comments are dropped."""
        tokens = Lexer('/// outer\n//! inner\n// plain\n//// also plain\nx').tokenize()
        self.assertEqual(tokens[0].type, TokenType.OUTER_DOC)
        self.assertEqual(tokens[0].value, ' outer')
        self.assertEqual(tokens[1].type, TokenType.INNER_DOC)
        self.assertEqual(tokens[2].type, TokenType.IDENTIFIER)

    def test_nested_block_comments(self):
        """Test that block comments nest."""
        tokens = Lexer('/* a /* b */ c */ x').tokenize()
        self.assertEqual(len(tokens), 2)
        self.assertEqual(tokens[0].value, 'x')

    def test_string_literals(self):
        """Test plain, escaped and raw string literals."""
        tokens = Lexer('"a\\"b" r#"c"d"# b"e"').tokenize()
        self.assertEqual([t.value for t in tokens[:3]], ['a"b', 'c"d', 'e'])
        self.assertTrue(all(t.type == TokenType.STRING_LITERAL for t in tokens[:3]))

    def test_raw_identifier(self):
        """Test that r#type is an identifier named type."""
        tokens = Lexer('r#type').tokenize()
        self.assertEqual(tokens[0].type, TokenType.IDENTIFIER)
        self.assertEqual(tokens[0].value, 'type')

    def test_unterminated_string_raises(self):
        """Test that an unterminated string is a syntax error."""
        with self.assertRaises(SyntaxError):
            Lexer('"abc').tokenize()

    def test_unknown_character_raises(self):
        """Test that an unexpected character reports its position."""
        with self.assertRaises(SyntaxError) as cm:
            Lexer('fn f() {}\n`').tokenize()
        self.assertIn('line 2', str(cm.exception))


class TestParser(unittest.TestCase):
    """Test the item-level Rust parser."""

    def test_items(self):
        """Test that each item kind is recognized."""
        ast = parse('''
            #![allow(unused)]
            use near_sdk::{near_bindgen, env};
            near_sdk::setup_alloc!();
            const MAX: u8 = 1;
            static mut COUNT: u32 = 0;
            type Balance = u128;
            struct Unit;
            struct Pair(pub u8, (u8, u8));
            enum Kind { A = 1, B(u8), C { x: u8 } }
            trait T: Clone { fn m(&self); }
            impl<X: Clone> T for Wrapper<X> where X: Copy {}
            mod outer;
            mod inner { fn f() {} }
            macro_rules! m { () => {}; }
            pub const fn g() -> u8 { 1 }
        ''')
        kinds = [type(item) for item in ast.items]
        self.assertEqual(kinds, [
            OtherItem, OtherItem, OtherItem, OtherItem, TypeAlias, StructDefinition,
            StructDefinition, EnumDefinition, TraitDefinition, ImplDefinition,
            ModuleDefinition, ModuleDefinition, OtherItem, FunctionDefinition,
        ])
        self.assertEqual(ast.attrs[0].path, 'allow')
        self.assertEqual(ast.items[6].style, 'tuple')
        self.assertEqual(len(ast.items[6].fields), 2)
        self.assertEqual([v.style for v in ast.items[7].variants], ['unit', 'tuple', 'named'])
        self.assertEqual(ast.items[7].variants[0].discriminant, '1')
        self.assertEqual(ast.items[8].supertraits, ['Clone'])
        self.assertFalse(ast.items[8].methods[0].has_body)
        self.assertEqual(ast.items[9].trait_name, 'T')
        self.assertEqual(ast.items[9].generics, ['X'])
        self.assertIsNone(ast.items[10].items)
        self.assertEqual(len(ast.items[11].items), 1)
        self.assertTrue(ast.items[13].sig.is_const)

    def test_attributes(self):
        """Test path, list and name-value attributes."""
        attrs = attrs_of('''
            #[near_bindgen]
            #[derive(BorshSerialize, near_sdk::serde::Serialize)]
            #[serde(crate = "near_sdk::serde")]
            #[doc = " explicit"]
        ''')
        self.assertEqual(attrs[0].path, 'near_bindgen')
        self.assertEqual(attrs[1].args, ['BorshSerialize', 'near_sdk::serde::Serialize'])
        self.assertEqual(attrs[2].args, ['crate'])
        self.assertTrue(attrs[3].is_doc)
        self.assertEqual(attrs[3].value, ' explicit')

    def test_block_doc_comment(self):
        """Test that a block doc comment yields one doc attribute per line."""
        attrs = attrs_of('/**\n * Hello\n *   indented\n */')
        self.assertEqual([a.value for a in attrs], [' Hello', '   indented'])

    def test_block_doc_comment_with_text_on_opening_line(self):
        """Test that text after `/**` is kept and later lines lose their `*`."""
        attrs = attrs_of('/** First line\n     * second line\n     */')
        self.assertEqual([a.value for a in attrs], [' First line', ' second line'])
        self.assertEqual(DocExtractor().get_docs(attrs), ['First line', 'second line'])

    def test_visibility(self):
        """Test restricted visibilities."""
        ast = parse('''
            impl S {
                pub fn a() {}
                pub(crate) fn b() {}
                pub(in crate::x) fn c() {}
                fn d() {}
            }
        ''')
        self.assertEqual([m.visibility for m in ast.items[0].methods],
                         ['pub', 'pub(crate)', 'pub(in crate::x)', ''])

    def test_receivers(self):
        """Test the receiver forms and their mutability."""
        ast = parse('''
            impl S {
                fn a(self) {}
                fn b(mut self) {}
                fn c(&self) {}
                fn d(&mut self) {}
                fn e(&'a mut self) {}
                fn f(self: &mut Self) {}
                fn g(x: u8) {}
            }
        ''')
        kinds = [receiver_kind(m.sig) for m in ast.items[0].methods]
        self.assertEqual(kinds, [
            ReceiverKind.IMMUTABLE, ReceiverKind.MUTABLE, ReceiverKind.IMMUTABLE,
            ReceiverKind.MUTABLE, ReceiverKind.MUTABLE, ReceiverKind.MUTABLE,
            ReceiverKind.NONE,
        ])

    def test_parameter_patterns(self):
        """Test that only identifier patterns yield a parameter name."""
        ast = parse('impl S { fn h(&self, (a, b): (u8, u8), mut c: u8, _: u8) {} }')
        params = ast.items[0].methods[0].sig.params
        self.assertEqual([p.name for p in params], [None, 'c', None])
        self.assertEqual(params[0].pattern, '(a, b)')

    def test_types(self):
        """Test the structural type shapes."""
        self.assertIsInstance(parse_type('()'), TupleType)
        self.assertIsInstance(parse_type('(u8)'), PathType)
        self.assertIsInstance(parse_type('(u8,)'), TupleType)
        ref = parse_type("&'a mut Vec<u8>")
        self.assertIsInstance(ref, ReferenceType)
        self.assertTrue(ref.mutable)
        path = parse_type("std::collections::HashMap<'static, String, Vec<u8>>")
        self.assertEqual(path.joined(), 'std::collections::HashMap')
        self.assertEqual(len(path.args), 2)
        self.assertEqual(str(parse_type('[u8; 32]')), '[u8; 32]')

    def test_raw_types(self):
        """Test that unsupported shapes keep their source text."""
        for text in ('fn(u8) -> u8', 'dyn Fn(u8) -> bool', 'impl Iterator<Item = u8>', '*const u8', '!'):
            ty = parse_type(text)
            self.assertIsInstance(ty, RawType, text)
            self.assertEqual(ty.text, text)

    def test_function_bodies_are_skipped(self):
        """Test that arbitrary body contents do not confuse the parser."""
        ast = parse('''
            fn f() -> impl Iterator<Item = u8> + '_ {
                let c = '{';
                let s = "}";
                match x { Some(v) => { v } None => 0 }
            }
            fn g() {}
        ''')
        self.assertEqual([item.name for item in ast.items], ['f', 'g'])

    def test_unbalanced_body_raises(self):
        """Test that an unclosed body is a syntax error."""
        with self.assertRaises(SyntaxError):
            parse('fn f() { (')

    def test_missing_item_raises(self):
        """Test that a stray token reports its position."""
        with self.assertRaises(SyntaxError) as cm:
            parse('struct S;\n42')
        self.assertIn('line 2', str(cm.exception))


class TestAttributeClassifier(unittest.TestCase):
    """Test role classification."""

    def setUp(self):
        self.classifier = AttributeClassifier()

    def test_init_wins_over_mutability(self):
        for receiver in ReceiverKind:
            role = self.classifier.classify(receiver, attrs_of('#[init] #[payable]'))
            self.assertEqual(role, MethodRole.INIT)
        self.assertEqual(AttributeClassifier.display(MethodRole.INIT), (':rocket:', ' (*constructor*)'))

    def test_init_with_arguments(self):
        role = self.classifier.classify(ReceiverKind.NONE, attrs_of('#[init(ignore_state)]'))
        self.assertEqual(role, MethodRole.INIT)

    def test_payable_requires_mutable_receiver(self):
        payable = attrs_of('#[payable]')
        self.assertEqual(self.classifier.classify(ReceiverKind.MUTABLE, payable), MethodRole.PAYABLE_CALL)
        self.assertEqual(self.classifier.classify(ReceiverKind.IMMUTABLE, payable), MethodRole.VIEW)

    def test_mutable_is_call(self):
        self.assertEqual(self.classifier.classify(ReceiverKind.MUTABLE, []), MethodRole.CALL)
        self.assertEqual(AttributeClassifier.display(MethodRole.CALL), (':writing_hand:', ''))

    def test_unknown_attributes_ignored(self):
        role = self.classifier.classify(ReceiverKind.IMMUTABLE, attrs_of('#[whatever(x)]'))
        self.assertEqual(role, MethodRole.VIEW)
        self.assertEqual(AttributeClassifier.display(role), (':eyeglasses:', ''))

    def test_private_excluded(self):
        self.assertTrue(self.classifier.is_excluded(attrs_of('#[private]')))
        self.assertFalse(self.classifier.is_excluded(attrs_of('#[payable]')))

    def test_configured_attribute_names(self):
        classifier = AttributeClassifier(Settings(init_attr='constructor'))
        self.assertEqual(classifier.classify(ReceiverKind.NONE, attrs_of('#[constructor]')), MethodRole.INIT)
        self.assertEqual(classifier.classify(ReceiverKind.NONE, attrs_of('#[init]')), MethodRole.VIEW)

    def test_attribute_helpers(self):
        attrs = attrs_of('#[near_sdk::near_bindgen] #[derive(near_sdk::serde::Serialize)]')
        self.assertTrue(has_attr(attrs, 'near_bindgen'))
        self.assertTrue(derives(attrs, 'Serialize'))
        self.assertFalse(derives(attrs, 'Deserialize'))


class TestTypeTranslator(unittest.TestCase):
    """Test Rust to TypeScript type translation."""

    def setUp(self):
        self.diagnostics = Diagnostics()
        self.translator = TypeTranslator(self.diagnostics)

    def ts(self, text):
        return self.translator.translate(parse_type(text))

    def test_scalars(self):
        self.assertEqual(self.ts('bool'), 'boolean')
        self.assertEqual(self.ts('u32'), 'number')
        self.assertEqual(self.ts('f64'), 'number')
        self.assertEqual(self.ts('u64'), 'string')
        self.assertEqual(self.ts('u128'), 'string')
        self.assertEqual(self.ts('String'), 'string')
        self.assertEqual(self.ts('&str'), 'string')

    def test_paths_flatten_to_trailing_segment(self):
        self.assertEqual(self.ts('near_sdk::json_types::U128'), 'U128')
        self.assertEqual(self.ts('AccountId'), 'AccountId')

    def test_containers(self):
        self.assertEqual(self.ts('Option<Vec<u8>>'), 'number[]|null')
        self.assertEqual(self.ts('Vec<Option<u8>>'), '(number|null)[]')
        self.assertEqual(self.ts('Vec<Vec<u8>>'), 'number[][]')
        self.assertEqual(self.ts('HashMap<String, Vec<u64>>'), 'Record<string, string[]>')
        self.assertEqual(self.ts('Box<Option<u8>>'), 'number|null')
        self.assertEqual(self.ts('Vec<Box<Option<u8>>>'), '(number|null)[]')
        self.assertEqual(self.ts('Result<u64, String>'), 'string')
        self.assertEqual(self.ts('Wrapper<u8>'), 'Wrapper<number>')

    def test_tuples_and_arrays(self):
        self.assertEqual(self.ts('(String, BTreeSet<i32>)'), '[string, number[]]')
        self.assertEqual(self.ts('()'), 'void')
        self.assertEqual(self.ts('[u8; 32]'), 'number[]')
        self.assertEqual(self.ts('&[Option<u8>]'), '(number|null)[]')
        self.assertEqual(self.diagnostics.count, 0)

    def test_return_types(self):
        self.assertEqual(self.translator.translate_return(None), 'void')
        self.assertEqual(self.translator.translate_return(parse_type('Self')), 'void')
        self.assertEqual(self.translator.translate_return(parse_type('()')), 'void')
        self.assertEqual(self.translator.translate_return(parse_type('Option<u8>')), 'number|null')

    def test_self_nested_in_container(self):
        self_option = parse_type('Option<Self>')
        self.assertEqual(self.translator.translate(self_option, self_type='C'), 'C|null')
        self.assertEqual(self.translator.translate_return(parse_type('Vec<Self>'), self_type='C'), 'C[]')
        self.assertEqual(self.translator.translate_return(parse_type('Self'), self_type='C'), 'void')
        self.assertEqual(self.diagnostics.count, 0)

    def test_self_without_implementing_type_warns(self):
        self.assertEqual(self.ts('Option<Self>'), 'unknown|null')
        self.assertEqual(self.diagnostics.codes(), ['W001'])

    def test_unsupported_type_warns(self):
        self.assertEqual(self.ts('Box<dyn Fn(u8)>'), 'unknown')
        self.assertEqual(self.diagnostics.codes(), ['W001'])

    def test_arity_mismatch_warns(self):
        self.assertEqual(self.ts('Option<u8, u8>'), 'unknown')
        self.assertEqual(self.diagnostics.codes(), ['W002'])

    def test_deterministic(self):
        text = 'HashMap<AccountId, Vec<(u64, Option<String>)>>'
        self.assertEqual(self.ts(text), self.ts(text))


class TestDocExtractor(unittest.TestCase):
    """Test doc line extraction."""

    def test_strips_one_leading_space(self):
        attrs = attrs_of('///  two spaces\n///none\n///\n#[serde(skip)]\n/// ```')
        self.assertEqual(DocExtractor().get_docs(attrs), [' two spaces', 'none', '', '```'])

    def test_merge_keeps_order_and_duplicates(self):
        self.assertEqual(DocExtractor.merge(['a', 'b'], ['b', 'c']), ['a', 'b', 'b', 'c'])


class TestTraitRegistry(unittest.TestCase):
    """Test trait registration and lookup."""

    def test_forward_traits_records_method_docs(self):
        ast = parse('''
            /// Trait docs
            trait T {
                /// Method docs
                fn m(&self);
                fn n(&self) {}
            }
        ''')
        registry = TraitRegistry()
        registry.forward_traits(ast.items, 'a.rs')
        definition = registry.lookup('T')
        self.assertEqual(definition.docs, ['Trait docs'])
        self.assertEqual(definition.docs_for('m'), ['Method docs'])
        self.assertEqual(definition.docs_for('n'), [])
        self.assertEqual(definition.docs_for('missing'), [])
        self.assertIn('T', registry)
        self.assertIsNone(registry.lookup('U'))

    def test_redefinition_overwrites(self):
        diagnostics = Diagnostics()
        registry = TraitRegistry(diagnostics=diagnostics)
        registry.forward_traits(parse('trait T { /// first\nfn m(&self); }').items, 'a.rs')
        registry.forward_traits(parse('trait T { /// second\nfn m(&self); }').items, 'b.rs')
        self.assertEqual(registry.lookup('T').docs_for('m'), ['second'])
        self.assertEqual(len(registry), 1)
        self.assertEqual(diagnostics.codes(), ['I002'])

    def test_forward_traits_records_signatures(self):
        registry = TraitRegistry()
        registry.forward_traits(parse('trait T { fn m(&self, amount: u8); }').items, 'a.rs')
        sig = registry.lookup('T').signature_for('m')
        self.assertEqual([p.name for p in sig.params], ['amount'])
        self.assertIsNone(registry.lookup('T').signature_for('missing'))


class TestInterfaceResolver(unittest.TestCase):
    """Test resolution of near_bindgen impl blocks."""

    def resolve(self, source, registry=None, diagnostics=None):
        ast = parse(source)
        registry = registry or TraitRegistry()
        registry.forward_traits(ast.items)
        resolver = InterfaceResolver(registry, diagnostics=diagnostics)
        return resolver.resolve(ast.items, 'lib.rs')

    def test_input_methods(self):
        impls = self.resolve(INPUT1)
        self.assertEqual([impl.context.name for impl in impls], ['C', 'C', 'I', 'K'])
        self.assertEqual([m.name for m in impls[0].methods], [
            'init_here', 'get_f128', 'set_f128', 'get_f128_other_way',
            'more_types', 'set_f128_with_sum',
        ])
        self.assertEqual([m.role for m in impls[0].methods], [
            MethodRole.INIT, MethodRole.VIEW, MethodRole.CALL, MethodRole.VIEW,
            MethodRole.CALL, MethodRole.PAYABLE_CALL,
        ])
        self.assertEqual(impls[3].methods, [])

    def test_private_never_exposed(self):
        impls = self.resolve('''
            #[near_bindgen]
            impl T for C {
                #[private] #[init] fn a(&mut self) {}
                #[private] pub fn b(&self) {}
            }
        ''')
        self.assertEqual(impls[0].methods, [])

    def test_trait_methods_exposed_without_pub(self):
        impls = self.resolve('#[near_bindgen] impl T for C { fn a(&self) {} }')
        self.assertEqual([m.name for m in impls[0].methods], ['a'])

    def test_restricted_visibility_not_exposed(self):
        impls = self.resolve('#[near_bindgen] impl C { pub(crate) fn a(&self) {} pub fn b(&self) {} }')
        self.assertEqual([m.name for m in impls[0].methods], ['b'])

    def test_blocks_without_bindgen_skipped(self):
        impls = self.resolve('impl C { pub fn a(&self) {} } #[near_bindgen] impl !Send for C {}')
        self.assertEqual(impls, [])

    def test_parameters_and_return(self):
        method = self.resolve(INPUT1)[0].methods[4]
        self.assertEqual([(p.name, p.ts_type) for p in method.params],
                         [('key', 'U128'), ('tuple', '[string, number[]]')])
        self.assertEqual(method.return_type, 'void')
        self.assertEqual(self.resolve(INPUT1)[0].methods[0].return_type, 'void')

    def test_block_doc_comment_on_method(self):
        impls = self.resolve('''
            #[near_bindgen]
            impl C {
                /** First line
                 * second line
                 */
                pub fn m(&self) {}
            }
        ''')
        self.assertEqual(impls[0].methods[0].docs, ['First line', 'second line'])

    def test_doc_merge(self):
        impls = self.resolve('''
            trait T {
                /// From trait
                fn m(&self);
            }
            #[near_bindgen]
            impl T for C {
                /// Own line
                fn m(&self) {}
                fn n(&self) {}
            }
        ''')
        self.assertEqual(impls[0].methods[0].docs, ['Own line', 'From trait'])
        self.assertEqual(impls[0].methods[1].docs, [])

    def test_unregistered_trait_is_informational(self):
        diagnostics = Diagnostics()
        impls = self.resolve('#[near_bindgen] impl T for C { /// doc\nfn m(&self) {} }',
                             diagnostics=diagnostics)
        self.assertEqual(impls[0].methods[0].docs, ['doc'])
        self.assertIsNone(impls[0].context.interface)
        self.assertEqual(diagnostics.codes(), ['I001'])
        self.assertEqual(diagnostics.warnings, [])

    def test_non_identifier_parameter_skipped(self):
        diagnostics = Diagnostics()
        impls = self.resolve('#[near_bindgen] impl C { pub fn m(&self, (a, b): (u8, u8), c: u8) {} }',
                             diagnostics=diagnostics)
        self.assertEqual([p.name for p in impls[0].methods[0].params], ['c'])
        self.assertEqual(diagnostics.codes(), ['W003'])

    def test_pattern_parameter_named_from_trait(self):
        diagnostics = Diagnostics()
        impls = self.resolve('''
            trait T { fn m(&self, amount: u8); }
            #[near_bindgen]
            impl T for C { fn m(&self, _: u8) {} }
        ''', diagnostics=diagnostics)
        self.assertEqual([(p.name, p.ts_type) for p in impls[0].methods[0].params],
                         [('amount', 'number')])
        self.assertEqual(diagnostics.codes(), [])

    def test_self_in_signature_names_implementing_type(self):
        diagnostics = Diagnostics()
        impls = self.resolve('''
            #[near_bindgen]
            impl a::C {
                pub fn m(&self, other: Vec<Self>) -> Option<Self> { None }
            }
        ''', diagnostics=diagnostics)
        method = impls[0].methods[0]
        self.assertEqual(method.params[0].ts_type, 'C[]')
        self.assertEqual(method.return_type, 'C|null')
        self.assertEqual(diagnostics.codes(), [])

    def test_trait_path_kept_for_display(self):
        impls = self.resolve('#[near_bindgen] impl a::b::T for C {}')
        self.assertEqual(impls[0].context.name, 'T')
        self.assertEqual(impls[0].context.display_name, 'a::b::T')

    def test_unnamed_self_type_falls_back(self):
        impls = self.resolve('#[near_bindgen] impl (u8, u8) { pub fn m(&self) {} }')
        self.assertEqual(impls[0].context.name, 'Contract')


class TestMarkdownGenerator(unittest.TestCase):
    """Test the generated Markdown documentation."""

    def generate(self, *sources):
        syn = NearSyn(no_now=True)
        units = [syn.parse_source(src, f'file{i}.rs') for i, src in enumerate(sources)]
        return syn.generate_md(units)

    def test_prelude_and_footer(self):
        md = self.generate(COUNTER)
        self.assertTrue(md.startswith(
            '<!-- AUTOGENERATED doc, do not modify! -->\n# Contract\n\n'
            '| Method | Description | Return |\n| ------ | ----------- | ------ |\n'))
        self.assertTrue(md.endswith(
            '\n---\n\nReferences\n\n'
            '- :rocket: Initialization method. Needs to be called right after deployment.\n'
            '- :eyeglasses: View only method, *i.e.*, does not modify the contract state.\n'
            '- :writing_hand: Call method, i.e., does modify the contract state.\n'
            '- &#x24C3; Payable method, i.e., call needs to have an attached NEAR deposit.\n'
            '\n---\n\n*This documentation was generated with* '
            f'**near-syn v{__version__}** <{__repository__}>\n'))

    def test_counter_sections(self):
        md = self.generate(COUNTER)
        self.assertIn('| :eyeglasses: `get` | Returns the value. | `string` |\n', md)
        self.assertIn('| &#x24C3; `add` |  | `void` |\n', md)
        self.assertIn('\nA simple counter.\n', md)
        self.assertIn(
            '\n## Methods for Counter\n'
            '\n### :eyeglasses: `get`\n'
            '\n```typescript\nget(): Promise<string>;\n```\n'
            '\nReturns the value.\n', md)
        self.assertIn(
            '\n### &#x24C3; `add`\n'
            '\n```typescript\nadd(args: { by: number|null }, gas?: any, amount?: any): Promise<void>;\n```\n',
            md)

    def test_input_table(self):
        md = self.generate(INPUT1)
        self.assertIn('| :rocket: `init_here` (*constructor*) | init func | `void` |\n', md)
        self.assertIn('| :eyeglasses: `get_f128` | Line 1 for get_f128 first Line 2 for get_f128 second | `U128` |\n', md)
        self.assertIn('| :writing_hand: `more_types` |  | `void` |\n', md)
        self.assertIn('| :eyeglasses: `get` | Single-line comment for get | `U128` |\n', md)
        self.assertNotIn('marked_as_private', md)
        self.assertNotIn('private_method_not_exported', md)

    def test_union_return_escaped_in_table(self):
        md = self.generate('#[near_bindgen] impl C { pub fn m(&self) -> Option<u8> { None } }')
        self.assertIn('| :eyeglasses: `m` |  | `number\\|null` |', md)
        self.assertIn('m(): Promise<number|null>;', md)

    def test_impl_section_headers(self):
        md = self.generate(INPUT1)
        self.assertIn('\n## Methods for C\n', md)
        self.assertIn('\n## Methods for `I` interface\n', md)
        self.assertIn('\n## Methods for `K` interface\n', md)
        self.assertNotIn('`J`', md)

    def test_qualified_trait_header(self):
        md = self.generate('#[near_bindgen] impl a::b::T for C { fn m(&self) {} }')
        self.assertIn('\n## Methods for `a::b::T` interface\n', md)

    def test_types_section(self):
        md = self.generate(INPUT1)
        self.assertIn('\n## Types\n', md)
        self.assertIn('\n### `AType`\n\n```typescript\nexport type AType = number;\n```\n\n\n### `BType`', md)
        self.assertIn('export type BType = number;\n```\n\nDoc-comments for a type def\n', md)
        self.assertIn('### `A`', md)
        self.assertNotIn('### `E0`', md)
        self.assertNotIn('### `C`', md)

    def test_code_blocks_in_docs_preserved(self):
        md = self.generate('''
            #[near_bindgen]
            impl C {
                /// Example:
                /// ```
                /// if (x) {
                ///     y();
                /// }
                /// ```
                pub fn m(&self) {}
            }
        ''')
        self.assertIn('Example:\n```\nif (x) {\n    y();\n}\n```\n', md)

    def test_idempotent(self):
        self.assertEqual(self.generate(INPUT1), self.generate(INPUT1))


class TestTypeScriptGenerator(unittest.TestCase):
    """Test the generated TypeScript bindings."""

    def generate(self, *sources):
        syn = NearSyn(no_now=True)
        units = [syn.parse_source(src, f'file{i}.rs') for i, src in enumerate(sources)]
        return syn.generate_ts(units)

    def test_counter_output(self):
        expected = (
            f'// TypeScript bindings generated with near-syn v{__version__} {__repository__}\n'
            '\n'
            '// Exports common NEAR Types\n'
            'export type U64 = string;\n'
            'export type I64 = string;\n'
            'export type U128 = string;\n'
            'export type I128 = string;\n'
            'export type AccountId = string;\n'
            'export type ValidAccountId = string;\n'
            'export type Base64VecU8 = string;\n'
            '\n'
            'export interface Counter {\n'
            '    /**\n'
            '     * Returns the value.\n'
            '     */\n'
            '    get(): Promise<string>;\n'
            '\n'
            '    add(args: { by: number|null }, gas?: any, amount?: any): Promise<void>;\n'
            '}\n'
            '\n'
            'export const CounterMethods = {\n'
            '    viewMethods: [\n'
            '        "get",\n'
            '    ],\n'
            '    changeMethods: [\n'
            '        "add",\n'
            '    ],\n'
            '};\n'
        )
        self.assertEqual(self.generate(COUNTER), expected)

    def test_type_aliases(self):
        ts = self.generate(INPUT1)
        self.assertIn('\nexport type AType = number;\n', ts)
        self.assertIn('/**\n * Doc-comments for a type def\n */\nexport type BType = number;\n', ts)

    def test_struct_and_enum_declarations(self):
        ts = self.generate(INPUT1)
        self.assertIn('export interface A {\n    a1_field: U64;\n    a2_field: U64;\n', ts)
        self.assertIn('     * Line for a3\n', ts)
        self.assertIn('    a3_field: U128;\n}\n', ts)
        self.assertIn('export interface B {\n    b: U64;\n}\n', ts)
        self.assertIn('export enum E {\n    V1 = "V1",\n    V2 = "V2",\n}\n', ts)
        self.assertNotIn('E0', ts)

    def test_tagged_enum_and_tuple_structs(self):
        ts = self.generate('''
            #[derive(Serialize)]
            enum Action { Stop, Move(u32), Jump(u8, u8), Say { text: String } }
            #[derive(Serialize)]
            struct Id(u64);
            #[derive(Serialize)]
            struct Point(u8, u8);
            #[derive(Serialize)]
            struct Marker;
            #[derive(Serialize)]
            struct Secret { shown: u8, #[serde(skip)] hidden: u8 }
        ''')
        self.assertIn('export type Action = "Stop" | { Move: number } | { Jump: [number, number] } '
                      '| { Say: { text: string } };\n', ts)
        self.assertIn('export type Id = string;\n', ts)
        self.assertIn('export type Point = [number, number];\n', ts)
        self.assertIn('export type Marker = null;\n', ts)
        self.assertIn('export interface Secret {\n    shown: number;\n}\n', ts)

    def test_serializable_union_skipped(self):
        syn = NearSyn(no_now=True)
        ts = syn.generate_ts([syn.parse_source(
            '#[derive(Serialize)] union Bits { a: u32, b: f32 }', 'lib.rs')])
        self.assertNotIn('Bits', ts)
        self.assertEqual(syn.diagnostics.codes(), ['W099'])

    def test_self_field_names_declaring_type(self):
        ts = self.generate('#[derive(Serialize)] struct Node { next: Option<Box<Self>> }')
        self.assertIn('export interface Node {\n    next: Node|null;\n}\n', ts)

    def test_qualified_trait_interface_uses_trailing_segment(self):
        ts = self.generate('#[near_bindgen] impl a::b::T for C { fn m(&self) {} }')
        self.assertIn('export interface T {\n', ts)
        self.assertIn('export interface C extends T {\n', ts)

    def test_u128_field_is_string(self):
        ts = self.generate('#[derive(Serialize)] struct S { a: AType, b: u128 }')
        self.assertIn('    a: AType;\n    b: string;\n', ts)

    def test_aggregate_interface(self):
        ts = self.generate(INPUT1)
        self.assertIn('export interface I {\n', ts)
        self.assertIn('export interface K {\n}\n', ts)
        self.assertIn('export interface C extends I, K {\n', ts)
        start = ts.index('export interface C extends')
        body = ts[start:ts.index('\n}\n', start)]
        names = ['init_here', 'get_f128(', 'set_f128(', 'get_f128_other_way',
                 'more_types', 'set_f128_with_sum', 'another_impl']
        positions = [body.index(name) for name in names]
        self.assertEqual(positions, sorted(positions))
        self.assertNotIn('    get(', body)
        self.assertIn('init_here(args: { f128: U128 }, gas?: any): Promise<void>;', body)

    def test_methods_lists(self):
        ts = self.generate(INPUT1)
        self.assertIn(
            'export const CMethods = {\n'
            '    viewMethods: [\n'
            '        "get_f128",\n'
            '        "get_f128_other_way",\n'
            '        "another_impl",\n'
            '        "get",\n'
            '    ],\n'
            '    changeMethods: [\n'
            '        "init_here",\n'
            '        "set_f128",\n'
            '        "more_types",\n'
            '        "set_f128_with_sum",\n'
            '    ],\n'
            '};\n', ts)

    def test_first_type_definition_wins(self):
        ts = self.generate('type X = u8;', 'type X = String;')
        self.assertIn('export type X = number;', ts)
        self.assertNotIn('export type X = string;', ts)

    def test_contract_name_fallbacks(self):
        self.assertIn('export interface Token extends', self.generate('#[near_bindgen] impl T for Token {}'))
        self.assertIn('export interface Contract {\n}\n', self.generate('type X = u8;'))

    def test_idempotent(self):
        self.assertEqual(self.generate(INPUT1), self.generate(INPUT1))


class TestCrossFileResolution(unittest.TestCase):
    """Test the two-pass pipeline over several files."""

    IMPL = '''
        #[near_bindgen]
        impl T for C {
            /// Own docs
            fn m(&self) {}
        }
    '''
    TRAIT = '''
        trait T {
            /// Trait docs
            fn m(&self);
        }
    '''

    def test_trait_defined_in_later_file(self):
        syn = NearSyn(no_now=True)
        units = [syn.parse_source(self.IMPL, 'impl.rs'), syn.parse_source(self.TRAIT, 'trait.rs')]
        resolved = syn.resolve(units)
        self.assertEqual(resolved[0].impls[0].methods[0].docs, ['Own docs', 'Trait docs'])
        self.assertEqual(syn.diagnostics.count, 0)

    def test_markdown_uses_merged_docs(self):
        syn = NearSyn(no_now=True)
        units = [syn.parse_source(self.IMPL, 'impl.rs'), syn.parse_source(self.TRAIT, 'trait.rs')]
        md = syn.generate_md(units)
        self.assertIn('| :eyeglasses: `m` | Own docs Trait docs | `void` |', md)
        self.assertIn('\nOwn docs\nTrait docs\n', md)


class TestDiagnostics(unittest.TestCase):
    """Test diagnostic collection and reporting."""

    def test_summary_groups_warnings(self):
        diagnostics = Diagnostics()
        diagnostics.warn_unsupported_type('fn()', 'a.rs', 3)
        diagnostics.warn_parameter_pattern('m', '(a, b)', 'a.rs', 4)
        diagnostics.info_unregistered_trait('T', 'a.rs', 5)
        buf = io.StringIO()
        diagnostics.print_summary(file=buf)
        out = buf.getvalue()
        self.assertIn('near-syn warnings (2):', out)
        self.assertIn('  parameter: 1 occurrence(s)', out)
        self.assertIn('  type: 1 occurrence(s)', out)
        self.assertNotIn('I001', out)
        self.assertEqual(diagnostics.get_summary(), 'near-syn warnings: 1 parameter, 1 type')

    def test_verbose_lists_everything(self):
        diagnostics = Diagnostics(verbose=True)
        diagnostics.warn_unsupported_type('fn()', 'a.rs', 3)
        diagnostics.info_trait_redefined('T', 'b.rs', 1)
        buf = io.StringIO()
        diagnostics.print_summary(file=buf)
        out = buf.getvalue()
        self.assertIn('[warning] a.rs:3: Type "fn()" has no TypeScript equivalent; using unknown. (W001)', out)
        self.assertIn('near-syn info (1):', out)
        self.assertIn('(I002)', out)

    def test_silent_when_empty(self):
        buf = io.StringIO()
        Diagnostics().print_summary(file=buf)
        self.assertEqual(buf.getvalue(), '')
        self.assertEqual(Diagnostics().get_summary(), 'No near-syn warnings.')


class TestSettings(unittest.TestCase):
    """Test configuration loading."""

    def write_config(self, directory, content):
        path = os.path.join(directory, 'near-syn.json')
        with open(path, 'w') as f:
            f.write(content)
        return path

    def test_overrides(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = self.write_config(tmp, json.dumps({'payable_attr': 'deposit', 'prelude_types': ['U64']}))
            settings = load_settings(path)
        self.assertEqual(settings.payable_attr, 'deposit')
        self.assertEqual(settings.prelude_types, ['U64'])
        self.assertEqual(settings.init_attr, 'init')

    def test_invalid_configs(self):
        with tempfile.TemporaryDirectory() as tmp:
            for content in ('{"nope": 1}', '{"init_attr": 3}', '[1]', '{bad json',
                            '{"prelude_types": "U64"}'):
                path = self.write_config(tmp, content)
                with self.assertRaises(NearSynError) as cm:
                    load_settings(path)
                self.assertTrue(str(cm.exception).startswith(path))

    def test_missing_file(self):
        with self.assertRaises(NearSynError):
            load_settings('/nonexistent/near-syn.json')

    def test_prelude_follows_settings(self):
        syn = NearSyn(Settings(prelude_types=[]), no_now=True)
        ts = syn.generate_ts([syn.parse_source(COUNTER, 'lib.rs')])
        self.assertNotIn('Exports common NEAR Types', ts)


class TestCommandLine(unittest.TestCase):
    """Test the near-syn command line."""

    def run_main(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_md_and_ts_commands(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'lib.rs')
            with open(path, 'w') as f:
                f.write(COUNTER)
            code, out, _ = self.run_main(['md', '--no-now', path])
            self.assertEqual(code, 0)
            self.assertTrue(out.startswith('<!-- AUTOGENERATED doc, do not modify! -->'))
            code, out, _ = self.run_main(['ts', '--no-now', path])
            self.assertEqual(code, 0)
            self.assertIn('export const CounterMethods', out)

    def test_output_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'lib.rs')
            target = os.path.join(tmp, 'out', 'contract.ts')
            with open(path, 'w') as f:
                f.write(COUNTER)
            code, out, _ = self.run_main(['ts', '--no-now', '-o', target, path])
            self.assertEqual(code, 0)
            self.assertEqual(out, '')
            with open(target) as f:
                self.assertIn('export interface Counter', f.read())

    def test_syntax_error_names_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            good = os.path.join(tmp, 'good.rs')
            bad = os.path.join(tmp, 'bad.rs')
            with open(good, 'w') as f:
                f.write(COUNTER)
            with open(bad, 'w') as f:
                f.write('struct S {')
            code, out, err = self.run_main(['md', '--no-now', good, bad])
        self.assertEqual(code, 1)
        self.assertEqual(out, '')
        self.assertIn(f'Error: {bad}: syntax error', err)

    def test_missing_file(self):
        code, out, err = self.run_main(['ts', '/nonexistent/lib.rs'])
        self.assertEqual(code, 1)
        self.assertIn('Error: /nonexistent/lib.rs: unable to read file', err)

    def test_usage_errors(self):
        for argv in ([], ['md'], ['rs', 'lib.rs']):
            with self.assertRaises(SystemExit) as cm:
                self.run_main(argv)
            self.assertEqual(cm.exception.code, 2)

    def test_timestamp(self):
        self.assertEqual(format_now(no_now=True), '')
        now = format_now()
        self.assertTrue(now.startswith(' on '))
        self.assertTrue(now.endswith(' UTC'))


if __name__ == '__main__':
    # Run tests with verbosity
    unittest.main(verbosity=2)

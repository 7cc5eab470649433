"""
Lumos Target Profiles
=====================
Per-language lookup tables the Renderer consults. A profile holds no
logic: every template is a str.format pattern over named fields.

Block styles:
  - brace   header {  ...  }
  - indent  header:   ...        (Python)
  - end     header    ...  end   (Ruby, Lua, Julia, Crystal)
"""
from dataclasses import dataclass, field
from typing import Optional

from .errors import UnsupportedTargetError


@dataclass(frozen=True)
class TargetProfile:
    """How one target language spells each construct. Defaults are JavaScript."""

    name: str
    comment: str = "//"
    block_style: str = "brace"        # "brace", "indent" or "end"
    terminator: str = ";"

    # Literals
    true: str = "true"
    false: str = "false"
    null: str = "null"
    undefined: Optional[str] = None   # falls back to `null`

    # Operators
    and_op: str = "&&"
    or_op: str = "||"
    not_op: str = "!"
    equals_op: str = "=="
    not_equals_op: str = "!="
    has_increment: bool = True        # ++/-- exist; otherwise rendered as += 1
    compound_assign: bool = True      # += exists; otherwise rendered as x = x + 1

    # Declarations
    var_template: str = "let {name} = {value}"
    const_template: str = "const {name} = {value}"
    sigil: str = ""
    function_template: str = "function {name}({params})"
    method_template: str = "{name}({params})"
    self_param: str = ""
    constructor_name: str = "constructor"
    class_template: str = "class {name}"
    extends_template: str = " extends {base}"

    # Control flow
    if_template: str = "if ({test})"
    elif_template: str = "else if ({test})"
    else_keyword: str = "else"
    while_template: str = "while ({test})"
    for_template: str = "for (let {var} = {start}; {var} <= {end}; {var}++)"
    break_keyword: str = "break"
    continue_keyword: str = "continue"
    empty_body: Optional[str] = None  # placeholder for an empty indented body

    # Exceptions; try_keyword None means the target has no exception syntax
    try_keyword: Optional[str] = "try"
    catch_template: str = "catch ({name})"
    finally_keyword: str = "finally"
    throw_template: str = "throw {value}"

    # Expressions
    print_template: str = "console.log({args})"
    print_separator: str = ", "
    this: str = "this"
    member_separator: str = "."
    new_template: str = "new {name}({args})"
    array_template: str = "[{items}]"
    object_template: str = "{{{items}}}"
    pair_template: str = "{key}: {value}"

    # Modules
    import_template: Optional[str] = None
    export_prefix: Optional[str] = None

    # Program wrapper
    prelude: tuple[str, ...] = field(default=())
    epilogue: tuple[str, ...] = field(default=())
    body_depth: int = 0


TARGETS: dict[str, TargetProfile] = {
    profile.name: profile for profile in (
        TargetProfile(
            "python", comment="#", block_style="indent", terminator="",
            true="True", false="False", null="None",
            and_op="and", or_op="or", not_op="not ", has_increment=False,
            var_template="{name} = {value}", const_template="{name} = {value}",
            function_template="def {name}({params})",
            method_template="def {name}({params})", self_param="self",
            constructor_name="__init__", extends_template="({base})",
            if_template="if {test}", elif_template="elif {test}",
            while_template="while {test}",
            for_template="for {var} in range(int({start}), int({end}) + 1)",
            empty_body="pass",
            catch_template="except Exception as {name}",
            throw_template="raise Exception({value})",
            print_template="print({args})", this="self",
            new_template="{name}({args})",
            import_template="from {source} import {names}",
        ),
        TargetProfile(
            "javascript", undefined="undefined", equals_op="===", not_equals_op="!==",
            import_template='import {{ {names} }} from "{source}"', export_prefix="export ",
        ),
        TargetProfile(
            "typescript", undefined="undefined", equals_op="===", not_equals_op="!==",
            function_template="function {name}({params}): any",
            import_template='import {{ {names} }} from "{source}"', export_prefix="export ",
        ),
        TargetProfile(
            "rust", null="None", has_increment=False,
            var_template="let mut {name} = {value}", const_template="let {name} = {value}",
            function_template="fn {name}({params})", method_template="fn {name}({params})",
            self_param="&mut self", constructor_name="new",
            class_template="struct {name}", extends_template=" /* extends {base} */",
            if_template="if {test}", elif_template="else if {test}",
            while_template="while {test}", for_template="for {var} in {start}..={end}",
            try_keyword=None, throw_template='panic!("{{}}", {value})',
            print_template='println!("{{}}", {args})', this="self",
            new_template="{name}::new({args})", array_template="vec![{items}]",
            object_template="HashMap::from([{items}])", pair_template="({key}, {value})",
            import_template="use {source}::{{{names}}}",
            prelude=("fn main() {",), epilogue=("}",), body_depth=1,
        ),
        TargetProfile(
            "go", terminator="", null="nil",
            var_template="{name} := {value}", const_template="const {name} = {value}",
            function_template="func {name}({params})", method_template="func {name}({params})",
            class_template="type {name} struct", extends_template=" /* {base} */",
            if_template="if {test}", elif_template="else if {test}",
            while_template="for {test}",
            for_template="for {var} := {start}; {var} <= {end}; {var}++",
            try_keyword=None, throw_template="panic({value})",
            print_template="fmt.Println({args})",
            new_template="New{name}({args})", array_template="[]interface{{}}{{{items}}}",
            object_template="map[string]interface{{}}{{{items}}}",
            prelude=("package main", "", 'import "fmt"', "", "func main() {"),
            epilogue=("}",), body_depth=1,
        ),
        TargetProfile(
            "java", null="null",
            var_template="var {name} = {value}", const_template="final var {name} = {value}",
            function_template="static Object {name}({params})",
            method_template="public Object {name}({params})",
            catch_template="catch (Exception {name})",
            throw_template="throw new RuntimeException(String.valueOf({value}))",
            print_template="System.out.println({args})", print_separator=" + ",
            array_template="List.of({items})", object_template="Map.of({items})",
            pair_template="{key}, {value}",
            import_template="import {source}.*",
            prelude=("public class LumosProgram {", "    public static void main(String[] args) {"),
            epilogue=("    }", "}"), body_depth=2,
        ),
        TargetProfile(
            "cpp", null="nullptr",
            var_template="auto {name} = {value}", const_template="const auto {name} = {value}",
            function_template="auto {name}({params})", method_template="auto {name}({params})",
            extends_template=" : public {base}",
            catch_template="catch (const std::exception& {name})",
            print_template="cout << {args} << endl", print_separator=" << ",
            this="(*this)", new_template="{name}({args})",
            array_template="vector<auto>{{{items}}}", pair_template="{{{key}, {value}}}",
            import_template='#include "{source}"',
            prelude=("#include <iostream>", "#include <string>", "using namespace std;", "", "int main() {"),
            epilogue=("    return 0;", "}"), body_depth=1,
        ),
        TargetProfile(
            "csharp",
            var_template="var {name} = {value}", const_template="var {name} = {value}",
            function_template="static object {name}({params})",
            method_template="public object {name}({params})",
            extends_template=" : {base}",
            catch_template="catch (Exception {name})",
            throw_template="throw new Exception({value}.ToString())",
            print_template="Console.WriteLine({args})", print_separator=" + ",
            array_template="new object[] {{{items}}}",
            object_template="new Dictionary<string, object> {{{items}}}",
            pair_template="[{key}] = {value}",
            import_template="using {source};",
            prelude=("using System;", "", "class Program {", "    static void Main() {"),
            epilogue=("    }", "}"), body_depth=2,
        ),
        TargetProfile(
            "php", equals_op="===", not_equals_op="!==",
            var_template="{name} = {value}", const_template="{name} = {value}",
            sigil="$", method_template="public function {name}({params})",
            constructor_name="__construct",
            catch_template="catch (Exception {name})",
            throw_template="throw new Exception({value})",
            print_template="echo {args}", print_separator=" . ",
            this="$this", member_separator="->", pair_template="{key} => {value}",
            object_template="[{items}]",
            import_template='require_once "{source}"',
            prelude=("<?php",), epilogue=("?>",),
        ),
        TargetProfile(
            "ruby", comment="#", block_style="end", terminator="",
            null="nil", not_op="!", has_increment=False,
            var_template="{name} = {value}", const_template="{name} = {value}",
            function_template="def {name}({params})", method_template="def {name}({params})",
            constructor_name="initialize", extends_template=" < {base}",
            if_template="if {test}", elif_template="elsif {test}",
            while_template="while {test}", for_template="({start}..{end}).each do |{var}|",
            continue_keyword="next",
            try_keyword="begin", catch_template="rescue => {name}", finally_keyword="ensure",
            throw_template="raise {value}",
            print_template="puts {args}", this="self",
            new_template="{name}.new({args})", pair_template="{key} => {value}",
            import_template="require {source}",
        ),
        TargetProfile(
            "swift", terminator="", null="nil", has_increment=False,
            var_template="var {name} = {value}", const_template="let {name} = {value}",
            function_template="func {name}({params})", method_template="func {name}({params})",
            constructor_name="init", extends_template=": {base}",
            if_template="if {test}", elif_template="else if {test}",
            while_template="while {test}", for_template="for {var} in {start}...{end}",
            try_keyword="do", catch_template="catch let {name}", finally_keyword="defer",
            print_template="print({args})", this="self",
            new_template="{name}({args})", object_template="[{items}]",
            import_template="import {source}",
        ),
        TargetProfile(
            "kotlin", terminator="",
            var_template="var {name} = {value}", const_template="val {name} = {value}",
            function_template="fun {name}({params})", method_template="fun {name}({params})",
            extends_template=" : {base}()",
            for_template="for ({var} in {start}..{end})",
            catch_template="catch ({name}: Exception)",
            throw_template="throw Exception({value}.toString())",
            print_template="println({args})", new_template="{name}({args})",
            array_template="mutableListOf({items})", object_template="mutableMapOf({items})",
            pair_template="{key} to {value}",
            import_template="import {source}.*",
            prelude=("fun main() {",), epilogue=("}",), body_depth=1,
        ),
        TargetProfile(
            "scala", terminator="", has_increment=False,
            var_template="var {name} = {value}", const_template="val {name} = {value}",
            function_template="def {name}({params}) =", method_template="def {name}({params}) =",
            for_template="for ({var} <- {start} to {end})",
            throw_template="throw new Exception({value}.toString)",
            print_template="println({args})",
            array_template="List({items})", object_template="Map({items})",
            pair_template="{key} -> {value}",
            import_template="import {source}._",
            prelude=("object Main extends App {",), epilogue=("}",), body_depth=1,
        ),
        TargetProfile(
            "dart",
            var_template="var {name} = {value}", const_template="final {name} = {value}",
            function_template="dynamic {name}({params})", method_template="dynamic {name}({params})",
            for_template="for (var {var} = {start}; {var} <= {end}; {var}++)",
            catch_template="catch ({name})",
            print_template="print({args})",
            import_template="import '{source}'",
            prelude=("void main() {",), epilogue=("}",), body_depth=1,
        ),
        TargetProfile(
            "lua", comment="--", block_style="end", terminator="",
            null="nil", and_op="and", or_op="or", not_op="not ",
            not_equals_op="~=", has_increment=False, compound_assign=False,
            var_template="local {name} = {value}", const_template="local {name} <const> = {value}",
            function_template="function {name}({params})",
            method_template="function {name}({params})", self_param="self",
            class_template="do -- class {name}", extends_template=" extends {base}",
            if_template="if {test} then", elif_template="elseif {test} then",
            while_template="while {test} do", for_template="for {var} = {start}, {end} do",
            continue_keyword="goto continue",
            try_keyword=None, throw_template="error({value})",
            print_template="print({args})", this="self",
            new_template="{name}.new({args})", array_template="{{{items}}}",
            pair_template="[{key}] = {value}",
            import_template='local {names} = require("{source}")',
        ),
        TargetProfile(
            "perl", comment="#",
            true="1", false="0", null="undef", sigil="$",
            var_template="my {name} = {value}", const_template="my {name} = {value}",
            function_template="sub {name}({params})", method_template="method {name}({params})",
            constructor_name="ADJUST", extends_template=" :isa({base})",
            elif_template="elsif ({test})",
            for_template="for my {var} ({start}..{end})",
            break_keyword="last", continue_keyword="next",
            throw_template="die {value}",
            print_template="say({args})", this="$self", member_separator="->",
            new_template="{name}->new({args})", pair_template="{key} => {value}",
            import_template="use {source}",
            prelude=("use v5.38;", "use experimental qw(class try);", ""),
        ),
        TargetProfile(
            "julia", comment="#", block_style="end", terminator="",
            null="nothing", has_increment=False,
            var_template="{name} = {value}", const_template="const {name} = {value}",
            method_template="function {name}({params})", self_param="self",
            constructor_name="new", class_template="mutable struct {name}",
            extends_template=" <: {base}",
            if_template="if {test}", elif_template="elseif {test}",
            while_template="while {test}", for_template="for {var} in {start}:{end}",
            catch_template="catch {name}", throw_template="error({value})",
            print_template="println({args})", this="self",
            new_template="{name}({args})", object_template="Dict({items})",
            pair_template="{key} => {value}",
            import_template="using {source}: {names}",
        ),
        TargetProfile(
            "zig", null="null", and_op="and", or_op="or", has_increment=False,
            var_template="var {name} = {value}", const_template="const {name} = {value}",
            function_template="fn {name}({params}) void",
            method_template="pub fn {name}({params}) void", self_param="self: anytype",
            constructor_name="init", class_template="const {name} = struct",
            extends_template=" /* {base} */",
            if_template="if ({test})", elif_template="else if ({test})",
            while_template="while ({test})",
            for_template="var {var}: i64 = {start}; while ({var} <= {end}) : ({var} += 1)",
            try_keyword=None, throw_template="@panic({value})",
            print_template='std.debug.print("{{any}}\\n", .{{{args}}})', this="self",
            new_template="{name}.init({args})", array_template=".{{{items}}}",
            object_template=".{{{items}}}", pair_template=".{{{key}, {value}}}",
            import_template='const {names} = @import("{source}")',
            prelude=('const std = @import("std");', "", "pub fn main() void {"),
            epilogue=("}",), body_depth=1,
        ),
        TargetProfile(
            "crystal", comment="#", block_style="end", terminator="",
            null="nil", has_increment=False,
            var_template="{name} = {value}", const_template="{name} = {value}",
            function_template="def {name}({params})", method_template="def {name}({params})",
            constructor_name="initialize", extends_template=" < {base}",
            if_template="if {test}", elif_template="elsif {test}",
            while_template="while {test}", for_template="({start}..{end}).each do |{var}|",
            continue_keyword="next",
            try_keyword="begin", catch_template="rescue {name}", finally_keyword="ensure",
            throw_template="raise {value}",
            print_template="puts {args}", this="self",
            new_template="{name}.new({args})", pair_template="{key} => {value}",
            import_template='require "{source}"',
        ),
    )
}


def list_targets() -> list[str]:
    """Names of every supported target language."""
    return list(TARGETS)


def get_profile(target: str) -> TargetProfile:
    """Profile for a target name (case-insensitive)."""
    profile = TARGETS.get(target.lower())
    if profile is None:
        raise UnsupportedTargetError(target)
    return profile

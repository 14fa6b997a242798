# prostgen

`prostgen` generates prost-style Rust source text from Protocol Buffers
file descriptors (`google.protobuf.descriptor_pb2.FileDescriptorProto`).
For each file descriptor it emits message structs, oneof enums, enums with
their string-name conversions, and nested modules, and it can hand service
definitions to a generator of your own.

## Installation

```
pip install prostgen
```

Running `protoc` from Python (see `prostgen.protoc`) needs the `protoc`
compiler. Set the `PROTOC` environment variable to its path, or put `protoc`
on your `PATH`. If `PROTOC_INCLUDE` is set, it must name an existing
directory; it is passed to `protoc` after your own include directories.

## Usage

The package is a set of building blocks. A typical run gets a descriptor
set, generates code for each file and writes one `.rs` file per package:

```python
from pathlib import Path

from prostgen.code_generator import CodeGenerator
from prostgen.config import Config
from prostgen.extern_paths import ExternPaths
from prostgen.includes import render_includes
from prostgen.message_graph import MessageGraph
from prostgen.module import Module
from prostgen.protoc import load_descriptor_set, protoc_from_env, run_protoc

config = Config().btree_map(["."]).type_attribute(".", "#[derive(Eq)]")

descriptor_path = run_protoc(
    protoc_from_env(), ["protos/items.proto"], ["protos/"],
    config.protoc_args, "descriptors.bin",
)
fds = load_descriptor_set(descriptor_path)

graph = MessageGraph(fds.file)
extern = ExternPaths(config.extern_paths, config.prost_types)

outputs: dict[Module, str] = {}
for fd in fds.file:
    module = Module.from_protobuf_package_name(fd.package)
    code = CodeGenerator(config, graph, extern, fd).generate()
    if code:
        outputs[module] = outputs.get(module, "") + code

out = Path("generated")
out.mkdir(exist_ok=True)
for module, code in outputs.items():
    (out / module.to_file_name_or(config.default_package_file)).write_text(code)
(out / "_includes.rs").write_text(render_includes(outputs, use_out_dir_env=False))
```

### Modules

- `prostgen.code_generator.CodeGenerator(config, message_graph, extern_paths, file)`:
  `generate()` returns the code for one file descriptor. Recursively nested
  message fields are boxed automatically. An unknown `syntax` raises
  `ValueError`.
- `prostgen.config.Config`: generation options; every setter returns the config.
- `prostgen.message_graph.MessageGraph(files)`: `is_nested(outer, inner)` tells
  whether one message type is reachable from another through non-repeated
  message fields.
- `prostgen.extern_paths.ExternPaths(paths, prost_types)`: resolves types
  provided by other crates; invalid or duplicate paths raise `ExternPathError`.
  With `prost_types` true, the `google.protobuf` types map to `::prost_types`
  and the wrapper types to plain Rust types.
- `prostgen.module.Module`: a module path built from a package name, with
  `to_file_name_or(default)` giving the output file name.
- `prostgen.includes.render_includes(modules, use_out_dir_env)`: the text of an
  include file of nested `pub mod` blocks. With `use_out_dir_env` the includes
  go through `env!("OUT_DIR")`; otherwise they are relative. Modules without a
  package path raise `ValueError`.
- `prostgen.protoc`: `protoc_from_env()`, `protoc_include_from_env()`,
  `run_protoc(protoc, protos, includes, protoc_args, output_path)` and
  `load_descriptor_set(path)`; failures raise `ProtocError`.
- `prostgen.resolver.TypeResolver`, `prostgen.enum_gen`,
  `prostgen.codegen_support`, `prostgen.ident` and `prostgen.ast` hold the
  type resolution, enum naming, escaping, identifier case conversion
  (`to_snake`, `to_upper_camel`) and comment rendering (`Comments`) used by
  the generator.

## Configuration

`Config` options that change the generated code:

- `btree_map(paths)`: `BTreeMap` instead of `HashMap` for matching map fields.
- `bytes(paths)`: `Bytes` instead of `Vec<u8>` for matching bytes fields.
- `type_attribute`, `message_attribute`, `enum_attribute`, `field_attribute`:
  attribute lines placed before matching items.
- `boxed(path)`: wraps matching fields in a `Box`.
- `disable_comments(paths)`: leaves out doc comments on matching items.
- `extern_path(proto_path, rust_path)`: recorded in `config.extern_paths` for
  building an `ExternPaths`.
- `compile_well_known_types()`: sets `config.prost_types` to false.
- `retain_enum_prefix()`: keeps the enum name prefix on variant names.
- `prost_path(path)`: the path used in `derive(... Message)` and related
  attributes (default `::prost`).
- `service_generator(generator)`: see below.

Paths beginning with `.` are fully qualified and match by prefix (`.` matches
everything); other paths match as suffixes of the fully qualified name.

`protoc_arg`, `out_dir`, `default_package_filename`, `include_file`,
`file_descriptor_set_path`, `skip_protoc_run` and `format` only record their
values on the config (`protoc_args`, `output_dir`, `default_package_file`,
`include_file_path`, `descriptor_set_path`, `skip_protoc`, `fmt`) for your own
driver code to use.

## Services

Subclass `prostgen.config.ServiceGenerator` and pass an instance to
`Config.service_generator`. `CodeGenerator.generate()` calls
`generate(service)` for each service in the file and then `finalize()` once,
appending the text they return. `finalize_package(package)` is never called
by the package; call it yourself once per package if you need it.

## What the package does not do

There is no single entry point that runs `protoc`, generates every file and
writes the output directory and include file; the example above shows how to
put the pieces together. There is no command-line tool, and generated code is
not reformatted (the `format` option has no effect).

## Running the tests

```
pip install prostgen[test]
pytest
```
# tokenkit

Text normalization and pre-tokenization building blocks for subword
tokenizers. Every transformation keeps a byte-level alignment between the
original input and the normalized text, so any span of the normalized string
can be mapped back to the span of the original string it came from, and the
other way round. Offsets are UTF-8 byte offsets unless you ask for
characters.

## Installation

```
pip install .
```

To also install the test dependencies:

```
pip install .[test]
```

## What's inside

- `tokenkit.pattern`: patterns that cut a string into contiguous pieces
  flagged as match or not (`OffsetsMatch`). They are `CharPattern`,
  `StringPattern`, `RegexPattern`, `FnPattern` and `InvertPattern`.
  `SplitDelimiterBehavior` (`REMOVED`, `ISOLATED`, `MERGED_WITH_PREVIOUS`,
  `MERGED_WITH_NEXT`, `CONTIGUOUS`) says what happens to delimiters when
  splitting.
- `tokenkit.ranges`: `Range` and `IndexOn` for spans on either the original
  or the normalized string, plus the helpers `range_of`, `bytes_to_char`,
  `char_to_bytes`, `expand_alignments` and `apply_sign`.
- `tokenkit.alignment`: `AlignedString`, which holds the original string, the
  normalized string and the alignments between them. It offers
  `convert_offset`, `range`, `range_original`, `slice`, and the in-place
  rewrites `transform` and `transform_range`, driven by `ChangeMap` entries.
- `tokenkit.normalized`: `NormalizedString`, an `AlignedString` with the
  operations `nfd`, `nfc`, `nfkd`, `nfkc`, `filter`, `prepend`, `append`,
  `map`, `for_each`, `remove_accents`, `lowercase`, `uppercase`, `clear`,
  `lstrip`, `rstrip`, `strip`, `replace` and `split`. Operations change the
  string in place and return it, so they can be chained.
- `tokenkit.normalizers`: ready-made normalizers with a `normalize` method.
  They are `BertNormalizer`, `DefaultNormalizer` (and `lowercase_normalizer()`),
  `Prepend`, `Replace` (with `ReplacePattern.STRING` or `ReplacePattern.REGEX`,
  also usable as a decoder through `decode` and `decode_chain`), `Strip`,
  `StripAccents`, `UnicodeNormalizer` (with a `UnicodeForm`) and
  `NFC`/`NFD`/`NFKC`/`NFKD`. `Sequence` chains several of them. The
  character tests `is_bert_whitespace`, `is_bert_punctuation`, `is_control`
  and `is_chinese` live here too.
- `tokenkit.pretokenized`: `PreTokenizedString`, which holds the pieces
  (`Split`) of an input. Its `split`, `normalize` and `tokenize` methods
  process the pieces, and `get_splits` reports them as `PreToken` values
  with offsets against the original or the normalized text, in bytes or
  characters (`OffsetType`). `BytesToCharOffsetConverter` does the byte to
  character conversion.
- `tokenkit.pretokenizers`: `Whitespace`, `WhitespaceSplit`, `Split`,
  `CharDelimiterSplit`, `Punctuation`, `Digits` and `Sequence`, all with a
  `pre_tokenize` method.
- `tokenkit.bytelevel`: `ByteLevel`, which splits into words and maps every
  byte to a visible character, and decodes such tokens back
  (`decode`, `decode_chain`). `generate_bytes_char()` builds the byte table.
- `tokenkit.splitters`: `BertPreTokenizer`, `Metaspace` (pre-tokenizer and
  decoder) and `UnicodeScript`, with the helpers `get_script` and
  `fixed_script`.

## Example

```python
from tokenkit.normalized import NormalizedString
from tokenkit.ranges import Range, IndexOn

n = NormalizedString.from_str("    __Hello__   ")
n.filter(lambda c: c != " ").lowercase()

r = n.convert_offset(Range(6, 11, IndexOn.ORIGINAL))
print(r.values())           # (2, 7)
print(n.range(r))           # "hello"
print(n.range_original(r))  # "Hello"
```

Pre-tokenizing with offsets into the original text:

```python
from tokenkit.pretokenized import PreTokenizedString, OffsetType
from tokenkit.pretokenizers import Whitespace
from tokenkit.ranges import IndexOn

pts = PreTokenizedString.from_str("How are you doing?")
Whitespace().pre_tokenize(pts)
for tok in pts.get_splits(IndexOn.ORIGINAL, OffsetType.BYTE):
    print(tok.value, tok.offsets)
# How (0, 3)
# are (4, 7)
# you (8, 11)
# doing (12, 17)
# ? (17, 18)
```

Byte-level decoding:

```python
from tokenkit.bytelevel import ByteLevel

bl = ByteLevel(add_prefix_space=False)
print(bl.decode(["Hello", "Ġmy", "Ġfriend"]))  # "Hello my friend"
```

## What it does not do

tokenkit stops at pre-tokenization. It has no tokenization models (no BPE,
WordPiece or Unigram vocabularies), no training, and no post-processing into
encodings with ids, attention masks or special tokens. `PreTokenizedString.tokenize`
attaches tokens that your own function produces; `ByteLevel.trim_offsets` is
only stored as a setting, since nothing in the package trims offsets. There is
no command-line interface.

## Running the tests

```
pytest
```


class OsuError(Exception):
	"""Base error for .osu handling."""


class ParseError(OsuError):
	"""Raised when the text cannot be parsed into a Beatmap."""

	def __init__(self, message, section=None, line=None, line_number=None):
		super().__init__(message)
		self.message = message
		self.section = section
		self.line = line
		self.line_number = line_number

	def locate(self, section, line, line_number):
		# innermost location wins
		if self.section is None:
			self.section = section
		if self.line is None:
			self.line = line
		if self.line_number is None:
			self.line_number = line_number
		return self

	def __str__(self):
		where = []
		if self.section is not None:
			where.append("[" + self.section + "]")
		if self.line_number is not None:
			where.append("line " + str(self.line_number))
		text = self.message
		if where:
			text = ' '.join(where) + ": " + text
		if self.line is not None:
			text += " (" + repr(self.line) + ")"
		if self.__cause__ is not None:
			text += ": " + str(self.__cause__)
		return text


class FormatError(ParseError):
	"""Missing or malformed `osu file format v<N>` header."""


class UnknownSectionError(ParseError):

	def __init__(self, name, **kwargs):
		super().__init__("unknown section " + repr(name), **kwargs)
		self.name = name


class FieldParseError(ParseError):

	def __init__(self, field, raw, **kwargs):
		super().__init__("could not parse " + field + " from " + repr(raw), **kwargs)
		self.field = field
		self.raw = raw


class RecordArityError(ParseError):

	def __init__(self, record, expected, actual, **kwargs):
		super().__init__(record + ": expected " + expected + " values, got " + str(actual), **kwargs)
		self.record = record
		self.expected = expected
		self.actual = actual


class UnknownVariantError(ParseError):

	def __init__(self, kind, raw, **kwargs):
		super().__init__("unknown " + kind + " " + repr(raw), **kwargs)
		self.kind = kind
		self.raw = raw


class CurveConversionError(OsuError):
	"""Raised when a slider path cannot be expressed as legacy bezier anchors."""


class NoControlPointsError(CurveConversionError):

	def __init__(self):
		super().__init__("there are no control points to convert")


class PerfectCurveWithMoreThan3PointsError(CurveConversionError):

	def __init__(self, n_points):
		super().__init__("perfect curve segment has " + str(n_points) + " points, expected at most 3")
		self.n_points = n_points


class ConversionError(OsuError):
	"""Raised when a map cannot be converted to the requested format or mode."""

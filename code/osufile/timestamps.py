from bisect import bisect_left, bisect_right
from operator import methodcaller

# near-match tolerance in ms, shared by every lookup
CLOSE_TOLERANCE = 2.0

LEFT = "left"
RIGHT = "right"

_timestamp = methodcaller("timestamp")


def is_close(a, b, tolerance=CLOSE_TOLERANCE):
	return abs(a - b) <= tolerance

def close_range(t, tolerance=CLOSE_TOLERANCE):
	return t - tolerance, t + tolerance

def between(items, start=None, end=None, include_start=True, include_end=False, key=None):
	"""Sub-list of the sorted `items` whose timestamps lie inside the bounds.

	`None` leaves a bound open. Defaults to the half-open range [start, end).
	"""
	key = key or _timestamp
	if start is None:
		lo = 0
	elif include_start:
		lo = bisect_left(items, start, key=key)
	else:
		lo = bisect_right(items, start, key=key)

	if end is None:
		hi = len(items)
	elif include_end:
		hi = bisect_right(items, end, lo=lo, key=key)
	else:
		hi = bisect_left(items, end, lo=lo, key=key)
	return items[lo:hi]

def at(items, t, tolerance=CLOSE_TOLERANCE, key=None):
	"""Any element of the sorted `items` within `tolerance` of `t`, or None."""
	key = key or _timestamp
	lo, hi = 0, len(items)
	while lo < hi:
		mid = (lo + hi) // 2
		stamp = key(items[mid])
		if is_close(stamp, t, tolerance):
			return items[mid]
		if stamp < t:
			lo = mid + 1
		else:
			hi = mid
	return None

def interleave(left, right, key=None):
	"""Merge two sorted sequences, yielding (LEFT, item) or (RIGHT, item).

	The left item is taken first when both heads share a timestamp.
	"""
	key = key or _timestamp
	left = iter(left)
	right = iter(right)
	l_item = next(left, None)
	r_item = next(right, None)
	while l_item is not None and r_item is not None:
		if key(l_item) <= key(r_item):
			yield LEFT, l_item
			l_item = next(left, None)
		else:
			yield RIGHT, r_item
			r_item = next(right, None)
	while l_item is not None:
		yield LEFT, l_item
		l_item = next(left, None)
	while r_item is not None:
		yield RIGHT, r_item
		r_item = next(right, None)

def group_by_closeness(items, tolerance=CLOSE_TOLERANCE, key=None):
	"""Yield runs of consecutive items lying within `tolerance` of the run's first item."""
	key = key or _timestamp
	group = []
	for item in items:
		if group and not is_close(key(item), key(group[0]), tolerance):
			yield group
			group = []
		group.append(item)
	if group:
		yield group

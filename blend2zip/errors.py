#+
# Exceptions raised while exploding .blend files.
#
# This program is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License as published by the Free Software
# Foundation, either version 3 of the License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful, but WITHOUT ANY
# WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS FOR
# A PARTICULAR PURPOSE. See the GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.
#-

class BlendError(Exception) :
    "base class for all errors reported by blend2zip."
    pass
#end BlendError

class BlendFormatError(BlendError) :
    "the input is not a valid .blend file, or some part of it is malformed." \
    " offset is the byte position at which the problem was detected, if known."

    def __init__(self, message, offset = None) :
        if offset != None :
            message = "%s (at offset 0x%x)" % (message, offset)
        #end if
        super().__init__(message)
        self.offset = offset
    #end __init__

#end BlendFormatError

class BlendTruncatedError(BlendError, EOFError) :
    "the input stream ended before the expected number of bytes could be read."

    def __init__(self, offset, wanted, got, what = None) :
        super().__init__ \
          (
                "premature end of input at offset 0x%x%s: wanted %d byte(s), got %d"
            %
                (offset, ("", " reading %s" % what)[what != None], wanted, got)
          )
        self.offset = offset
        self.wanted = wanted
        self.got = got
    #end __init__

#end BlendTruncatedError

class SchemaIndexError(BlendError, IndexError) :
    "a struct definition refers to an entry beyond the end of one of the SDNA tables."

    def __init__(self, table, index, size) :
        super().__init__ \
          (
            "%s index %d out of range, table has %d entries" % (table, index, size)
          )
        self.table = table
        self.index = index
        self.size = size
    #end __init__

#end SchemaIndexError

class OutputSelectionError(BlendError, ValueError) :
    "cannot work out how to write to the requested destination."
    pass
#end OutputSelectionError

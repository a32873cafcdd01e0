"""
DNS Message Codec

This module implements the RFC 1035 message structures consumed by the resolver:
- Record type and class enumerations
- Header, question and resource record encoding/decoding
- Human-readable record data (addresses, alias targets, text)
"""

import logging
import socket
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255


class DNSRecordType(IntEnum):
    """DNS Record Types"""

    A = 1
    NS = 2
    CNAME = 5
    SOA = 6
    PTR = 12
    MX = 15
    TXT = 16
    AAAA = 28
    SRV = 33
    ANY = 255


class DNSClass(IntEnum):
    """DNS Classes"""

    IN = 1
    CS = 2
    CH = 3
    HS = 4
    ANY = 255


def encode_name(name: str) -> bytes:
    """Encode a domain name using DNS label encoding"""
    if name in ("", "."):
        return b"\x00"

    result = b""
    for label in name.rstrip(".").split("."):
        label_bytes = label.encode("ascii")
        if not label_bytes or len(label_bytes) > 63:
            raise ValueError(f"Invalid label in {name!r}: {label!r}")
        result += struct.pack("!B", len(label_bytes)) + label_bytes
    return result + b"\x00"


def decode_name(data: bytes, offset: int) -> Tuple[str, int]:
    """Decode a (possibly compressed) domain name starting at offset.

    Returns the fully qualified name and the offset just past it in the
    original buffer.
    """
    labels = []
    end_offset = None
    jumps = 0
    wire_length = 1  # root label

    while True:
        if offset >= len(data):
            raise ValueError("Invalid name: offset out of bounds")

        length = data[offset]

        if length == 0:
            offset += 1
            break
        elif (length & 0xC0) == 0xC0:
            if offset + 1 >= len(data):
                raise ValueError("Invalid compression pointer")
            jumps += 1
            if jumps > 64:
                raise ValueError("Invalid name: compression loop")
            if end_offset is None:
                end_offset = offset + 2
            offset = ((length & 0x3F) << 8) | data[offset + 1]
        elif length & 0xC0:
            raise ValueError(f"Invalid label type: 0x{length & 0xC0:02x}")
        else:
            if offset + length + 1 > len(data):
                raise ValueError("Invalid label: length exceeds data")
            wire_length += length + 1
            if wire_length > MAX_NAME_LENGTH:
                raise ValueError(f"Invalid name: longer than {MAX_NAME_LENGTH} octets")
            labels.append(data[offset + 1 : offset + 1 + length].decode("ascii"))
            offset += length + 1

    name = ".".join(labels) + "." if labels else "."
    return name, end_offset if end_offset is not None else offset


def names_equal(left: str, right: str) -> bool:
    """Compare domain names case-insensitively, ignoring the root dot"""
    return left.rstrip(".").lower() == right.rstrip(".").lower()


@dataclass
class DNSHeader:
    """DNS Message Header"""

    transaction_id: int
    flags: int = 0
    question_count: int = 0
    answer_count: int = 0
    authority_count: int = 0
    additional_count: int = 0

    # Flag field components
    qr: bool = False
    opcode: int = 0
    aa: bool = False
    tc: bool = False
    rd: bool = True
    ra: bool = False
    z: int = 0
    rcode: int = 0

    def __post_init__(self):
        self.flags = (
            (int(self.qr) << 15)
            | (self.opcode << 11)
            | (int(self.aa) << 10)
            | (int(self.tc) << 9)
            | (int(self.rd) << 8)
            | (int(self.ra) << 7)
            | (self.z << 4)
            | self.rcode
        )

    def to_bytes(self) -> bytes:
        return struct.pack(
            "!HHHHHH",
            self.transaction_id,
            self.flags,
            self.question_count,
            self.answer_count,
            self.authority_count,
            self.additional_count,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "DNSHeader":
        """Parse header from the first 12 bytes"""
        if len(data) < 12:
            raise ValueError("Invalid DNS header: too short")

        tid, flags, qcount, acount, authcount, addcount = struct.unpack(
            "!HHHHHH", data[:12]
        )

        return cls(
            transaction_id=tid,
            flags=flags,
            question_count=qcount,
            answer_count=acount,
            authority_count=authcount,
            additional_count=addcount,
            qr=bool(flags & 0x8000),
            opcode=(flags >> 11) & 0x0F,
            aa=bool(flags & 0x0400),
            tc=bool(flags & 0x0200),
            rd=bool(flags & 0x0100),
            ra=bool(flags & 0x0080),
            z=(flags >> 4) & 0x07,
            rcode=flags & 0x0F,
        )


@dataclass
class DNSQuestion:
    """DNS Question Section"""

    name: str
    qtype: int
    qclass: int

    def to_bytes(self) -> bytes:
        return encode_name(self.name) + struct.pack("!HH", self.qtype, self.qclass)

    @classmethod
    def parse(cls, data: bytes, offset: int) -> Tuple["DNSQuestion", int]:
        name, new_offset = decode_name(data, offset)
        if new_offset + 4 > len(data):
            raise ValueError("Invalid question: not enough data for type and class")

        qtype, qclass = struct.unpack("!HH", data[new_offset : new_offset + 4])
        return cls(name=name, qtype=qtype, qclass=qclass), new_offset + 4


@dataclass
class DNSResourceRecord:
    """DNS Resource Record

    ``data`` is the decoded payload the resolver works with: a dotted-quad
    address for A records, a fully qualified name for CNAME/NS/PTR records.
    Name-valued rdata is expanded against the enclosing message at parse
    time so compression pointers never leak into ``rdata``.
    """

    name: str
    rtype: int
    rclass: int
    ttl: int
    rdata: bytes

    def to_bytes(self) -> bytes:
        header = struct.pack(
            "!HHIH", self.rtype, self.rclass, self.ttl, len(self.rdata)
        )
        return encode_name(self.name) + header + self.rdata

    @classmethod
    def parse(cls, data: bytes, offset: int) -> Tuple["DNSResourceRecord", int]:
        name, new_offset = decode_name(data, offset)

        if new_offset + 10 > len(data):
            raise ValueError("Invalid resource record: not enough data for header")

        rtype, rclass, ttl, rdlength = struct.unpack(
            "!HHIH", data[new_offset : new_offset + 10]
        )
        new_offset += 10

        if new_offset + rdlength > len(data):
            raise ValueError("Invalid resource record: not enough data for rdata")

        rdata = data[new_offset : new_offset + rdlength]

        if rtype == DNSRecordType.A and rdlength != 4:
            raise ValueError(f"Invalid A record for {name}: {rdlength} bytes of rdata")
        if rtype == DNSRecordType.AAAA and rdlength != 16:
            raise ValueError(
                f"Invalid AAAA record for {name}: {rdlength} bytes of rdata"
            )

        if rtype in (DNSRecordType.CNAME, DNSRecordType.NS, DNSRecordType.PTR):
            target, _ = decode_name(data, new_offset)
            rdata = encode_name(target)
        elif rtype == DNSRecordType.MX and rdlength > 2:
            target, _ = decode_name(data, new_offset + 2)
            rdata = rdata[:2] + encode_name(target)

        return (
            cls(name=name, rtype=rtype, rclass=rclass, ttl=ttl, rdata=rdata),
            new_offset + rdlength,
        )

    @property
    def data(self) -> str:
        return self.get_readable_rdata()

    def get_readable_rdata(self) -> str:
        """Get human-readable representation of rdata"""
        try:
            if self.rtype == DNSRecordType.A:
                return socket.inet_ntoa(self.rdata)
            elif self.rtype == DNSRecordType.AAAA:
                return socket.inet_ntop(socket.AF_INET6, self.rdata)
            elif self.rtype in (
                DNSRecordType.CNAME,
                DNSRecordType.NS,
                DNSRecordType.PTR,
            ):
                return decode_name(self.rdata, 0)[0]
            elif self.rtype == DNSRecordType.MX:
                priority = struct.unpack("!H", self.rdata[:2])[0]
                return f"{priority} {decode_name(self.rdata, 2)[0]}"
            elif self.rtype == DNSRecordType.TXT:
                strings = []
                offset = 0
                while offset < len(self.rdata):
                    length = self.rdata[offset]
                    if offset + length + 1 > len(self.rdata):
                        break
                    strings.append(
                        self.rdata[offset + 1 : offset + 1 + length].decode(
                            "utf-8", errors="replace"
                        )
                    )
                    offset += length + 1
                return '"' + '" "'.join(strings) + '"'
            else:
                return self.rdata.hex()
        except (OSError, ValueError, struct.error) as e:
            logger.warning(f"Failed to parse rdata for type {self.rtype}: {e}")
            return self.rdata.hex()


@dataclass
class DNSMessage:
    """Complete DNS Message"""

    header: DNSHeader
    questions: List[DNSQuestion] = field(default_factory=list)
    answers: List[DNSResourceRecord] = field(default_factory=list)
    authority: List[DNSResourceRecord] = field(default_factory=list)
    additional: List[DNSResourceRecord] = field(default_factory=list)

    def to_bytes(self) -> bytes:
        self.header.question_count = len(self.questions)
        self.header.answer_count = len(self.answers)
        self.header.authority_count = len(self.authority)
        self.header.additional_count = len(self.additional)

        result = self.header.to_bytes()
        for question in self.questions:
            result += question.to_bytes()
        for record in self.answers + self.authority + self.additional:
            result += record.to_bytes()
        return result

    @classmethod
    def from_bytes(cls, data: bytes) -> "DNSMessage":
        """Parse complete DNS message from bytes"""
        header = DNSHeader.from_bytes(data)
        offset = 12

        questions = []
        for _ in range(header.question_count):
            question, offset = DNSQuestion.parse(data, offset)
            questions.append(question)

        sections = []
        for count in (
            header.answer_count,
            header.authority_count,
            header.additional_count,
        ):
            records = []
            for _ in range(count):
                record, offset = DNSResourceRecord.parse(data, offset)
                records.append(record)
            sections.append(records)

        answers, authority, additional = sections
        return cls(
            header=header,
            questions=questions,
            answers=answers,
            authority=authority,
            additional=additional,
        )


def create_a_record(name: str, ip: str, ttl: int = 300) -> DNSResourceRecord:
    """Create an A record"""
    return DNSResourceRecord(
        name=name,
        rtype=DNSRecordType.A,
        rclass=DNSClass.IN,
        ttl=ttl,
        rdata=socket.inet_aton(ip),
    )


def create_cname_record(name: str, target: str, ttl: int = 300) -> DNSResourceRecord:
    """Create a CNAME record"""
    return DNSResourceRecord(
        name=name,
        rtype=DNSRecordType.CNAME,
        rclass=DNSClass.IN,
        ttl=ttl,
        rdata=encode_name(target),
    )


def create_ptr_record(name: str, target: str, ttl: int = 300) -> DNSResourceRecord:
    """Create a PTR record"""
    return DNSResourceRecord(
        name=name,
        rtype=DNSRecordType.PTR,
        rclass=DNSClass.IN,
        ttl=ttl,
        rdata=encode_name(target),
    )

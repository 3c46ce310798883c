import os, json, pdb
from pathlib import Path
import unittest as test

from ucam.lookup import records as recs

datadir = Path(__file__).parents[0] / "data"
with open(datadir/"people.json") as fd:
    people = json.load(fd)

class TestFormatRecord(test.TestCase):

    def test_format_full(self):
        rec = recs.format_record(people[0])
        self.assertTrue(isinstance(rec, recs.UserRecord))
        self.assertEqual(rec.username, "abc01")
        self.assertEqual(rec.name, "Jane Doe")
        self.assertEqual(rec.email, "jane.doe@eng.cam.ac.uk")
        self.assertEqual(rec.department, "ENG")
        self.assertEqual(rec.college, "KINGS")
        self.assertEqual(rec.title, "Lecturer")
        self.assertEqual(rec.website, "https://example.cam.ac.uk/~abc01")
        self.assertEqual(rec.surname, "Doe")
        self.assertEqual(rec.telephone, "32000")
        self.assertEqual(rec.forename, "Jane")

    def test_format_sparse(self):
        rec = recs.format_record({"identifier": {"scheme": "crsid", "value": "abc01"}})
        self.assertEqual(rec.username, "abc01")
        self.assertEqual(rec.email, "abc01@cam.ac.uk")
        self.assertIsNone(rec.name)
        self.assertIsNone(rec.department)
        self.assertIsNone(rec.college)
        self.assertIsNone(rec.title)
        self.assertIsNone(rec.website)
        self.assertIsNone(rec.surname)
        self.assertIsNone(rec.telephone)
        self.assertIsNone(rec.forename)

        rec = recs.format_record({"identifier": "abc01"}, email_domain="example.org")
        self.assertEqual(rec.email, "abc01@example.org")

    def test_format_bad_input(self):
        self.assertEqual(recs.format_record(None), recs.UserRecord())
        self.assertEqual(recs.format_record("abc01"), recs.UserRecord())
        self.assertEqual(recs.format_record([people[0]]), recs.UserRecord())
        self.assertEqual(recs.format_record({}), recs.UserRecord())

        rec = recs.format_record({"identifier": "abc01", "attributes": "goob"})
        self.assertEqual(rec.username, "abc01")

    def test_multivalues(self):
        rec = recs.format_record({ "identifier": "abc01",
                                   "displayName": ["Jane Doe", "J. Doe"],
                                   "surname": ["Doe"],
                                   "title": [] })
        self.assertEqual(rec.name, "Jane Doe")
        self.assertEqual(rec.forename, "Jane")
        self.assertIsNone(rec.title)

    def test_trimming(self):
        rec = recs.format_record({ "identifier": " abc01 ", "displayName": "  Jane  Doe ",
                                   "surname": " Doe", "title": "   ",
                                   "attributes": [{"scheme": "email", "value": " jd@cam.ac.uk\n"}] })
        self.assertEqual(rec.username, "abc01")
        self.assertEqual(rec.name, "Jane  Doe")
        self.assertEqual(rec.surname, "Doe")
        self.assertEqual(rec.forename, "Jane")
        self.assertEqual(rec.email, "jd@cam.ac.uk")
        self.assertIsNone(rec.title)

    def test_name_fallback(self):
        rec = recs.format_record({ "identifier": "abc01", "registeredName": "J. Doe",
                                   "surname": "Doe" })
        self.assertEqual(rec.name, "J. Doe")
        self.assertEqual(rec.forename, "J.")

    def test_aliases(self):
        rec = recs.format_record({ "identifier": "abc01",
                                   "attributes": [
                                       {"scheme": "labeledURI", "value": "https://goob.net/"},
                                       {"scheme": "universityPhone", "value": "30000"} ] })
        self.assertEqual(rec.website, "https://goob.net/")
        self.assertEqual(rec.telephone, "30000")

    def test_idempotent(self):
        for person in people:
            rec = recs.format_record(person)
            self.assertEqual(recs.format_record(rec), rec)
            self.assertEqual(recs.format_record(rec._asdict()), rec)

        rec = recs.format_record(people[1]).with_institutions({"HIST": "Faculty of History"})
        self.assertEqual(recs.format_record(rec), rec)

    def test_derive_forename(self):
        self.assertEqual(recs.derive_forename("Jane Doe", "Doe"), "Jane")
        self.assertEqual(recs.derive_forename("Mary Jane Doe ", "Doe"), "Mary Jane")
        self.assertEqual(recs.derive_forename("Jane Doe", "Smith"), "Jane Doe")
        self.assertEqual(recs.derive_forename("Doe Jane", "Doe"), "Doe Jane")
        self.assertIsNone(recs.derive_forename("Doe", "Doe"))
        self.assertIsNone(recs.derive_forename("Jane Doe", None))
        self.assertIsNone(recs.derive_forename(None, "Doe"))
        self.assertIsNone(recs.derive_forename("", ""))

    def test_with_institutions(self):
        rec = recs.UserRecord(username="abc01", department="ENG", college="KINGS")
        out = rec.with_institutions({"ENG": "Department of Engineering"})
        self.assertEqual(out.department, "Department of Engineering")
        self.assertEqual(out.college, "KINGS")
        self.assertEqual(rec.department, "ENG")

        out = recs.UserRecord(username="abc01").with_institutions({"ENG": "Engineering"})
        self.assertIsNone(out.department)
        self.assertIsNone(out.college)

    def test_is_cancelled(self):
        self.assertFalse(recs.is_cancelled(people[0]))
        self.assertTrue(recs.is_cancelled(people[2]))
        self.assertTrue(recs.is_cancelled({"cancelled": "true"}))
        self.assertFalse(recs.is_cancelled({"cancelled": "false"}))
        self.assertFalse(recs.is_cancelled({}))
        self.assertFalse(recs.is_cancelled(None))

    def test_crsid_of(self):
        self.assertEqual(recs.crsid_of(people[0]), "abc01")
        self.assertEqual(recs.crsid_of({"identifier": "mvl22"}), "mvl22")
        self.assertIsNone(recs.crsid_of({"identifier": {"scheme": "usn", "value": "3000"}}))
        self.assertIsNone(recs.crsid_of({}))
        self.assertIsNone(recs.crsid_of("abc01"))

    def test_institution_codes(self):
        codes = recs.institution_codes([recs.format_record(p) for p in people])
        self.assertEqual(codes, set("ENG KINGS HIST XYZZY".split()))
        self.assertEqual(recs.institution_codes([]), set())


if __name__ == '__main__':
    test.main()

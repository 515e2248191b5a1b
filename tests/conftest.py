import gzip
import logging

import pytest

from wiki_sqldump.config import LOG_FORMAT

PAGE_DUMP = """\
-- MySQL dump 10.19  Distrib 10.3.38-MariaDB, for debian-linux-gnu (x86_64)
--
-- Host: db1206    Database: testwiki
-- ------------------------------------------------------

DROP TABLE IF EXISTS `page`;
CREATE TABLE `page` (
  `page_id` int(8) unsigned NOT NULL AUTO_INCREMENT,
  `page_namespace` int(11) NOT NULL DEFAULT 0,
  `page_title` varbinary(255) NOT NULL DEFAULT '',
  PRIMARY KEY (`page_id`)
) ENGINE=InnoDB DEFAULT CHARSET=binary;

LOCK TABLES `page` WRITE;
INSERT INTO `page` VALUES (1,0,'Alpha',0,0.5),(2,0,'Beta',0,0.25),(3,0,'Gamma',0,NULL);
INSERT INTO `page` VALUES (4,0,'Delta',0,0.1),(5,2,'Some_user',0,NULL),(6,0,'O\\'Neil',1,NULL);
UNLOCK TABLES;
"""

LINKTARGET_DUMP = """\
-- linktarget
INSERT INTO `linktarget` VALUES (10,0,'Alpha'),(11,0,'Beta'),(12,0,'Gamma'),(13,0,'Missing'),(14,2,'Alpha');
"""

PAGELINKS_DUMP = """\
-- pagelinks
INSERT INTO `pagelinks` VALUES (1,0,11),(1,0,12),(2,0,12),(3,0,10),(4,0,12),(4,0,12);
INSERT INTO `pagelinks` VALUES (4,0,13),(5,2,10),(6,0,14),(99,0,10);
"""


@pytest.fixture
def dump_dir(tmp_path):
    """Small page/linktarget/pagelinks dumps; pagelinks is gzipped."""
    (tmp_path / "page.sql").write_text(PAGE_DUMP, encoding="utf-8")
    (tmp_path / "linktarget.sql").write_text(LINKTARGET_DUMP, encoding="utf-8")
    with gzip.open(tmp_path / "pagelinks.sql.gz", "wt", encoding="utf-8") as f:
        f.write(PAGELINKS_DUMP)
    return tmp_path


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging so they do not leak across tests."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler.formatter is not None and handler.formatter._fmt == LOG_FORMAT:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
